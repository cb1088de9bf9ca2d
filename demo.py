#!/usr/bin/env python
import os
from sdk.pystore import StoreClient, StoreAPIError

def main():
    c = StoreClient(base_url="http://127.0.0.1:3000", api_key=os.getenv("API_KEY", "your-secret-api-key"))

    # -----------------------------
    # List seeded products
    # -----------------------------
    print("Listing products...")
    print(c.list_products())

    # -----------------------------
    # Create products
    # -----------------------------
    print("\nCreating products...")
    kettle = c.create_product("Kettle", "1.7L electric kettle", 35, "kitchen")
    cable = c.create_product("USB Cable", "", 0, "electronics", in_stock=False)
    print(kettle)
    print(cable)

    # -----------------------------
    # Filter, search, paginate
    # -----------------------------
    print("\nKitchen products...")
    print(c.query_products(category="kitchen"))

    print("\nSearching for 'lap'...")
    print(c.search_products("lap"))

    print("\nElectronics, two per page...")
    print(c.query_products(category="electronics", page=1, limit=2))
    print(c.query_products(category="electronics", page=2, limit=2))

    # -----------------------------
    # Replace and delete
    # -----------------------------
    print("\nReplacing kettle...")
    print(c.replace_product(kettle["id"], "Kettle Pro", "2L kettle with temperature control", 59.5, "kitchen"))

    print("\nDeleting cable...")
    print(c.delete_product(cable["id"]))
    try:
        c.get_product(cable["id"])
    except StoreAPIError as e:
        print(f"Lookup after delete: {e}")

    # -----------------------------
    # Stats
    # -----------------------------
    print("\nCatalog stats...")
    print(c.product_stats())

if __name__ == "__main__":
    main()
