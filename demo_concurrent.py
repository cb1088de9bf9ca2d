import asyncio
import os
from sdk.pystore import StoreClient, StoreAPIError

async def simulate_create(client, n):
    try:
        product = await client.create_product_async(f"Widget {n}", f"Batch widget #{n}", 5 + n, "widgets")
        print(f"✅ created {product['name']} (ID: {product['id']})")
        return product
    except StoreAPIError as e:
        print(f"❌ Widget {n} failed: {e}")
    return None

async def main():
    c = StoreClient(base_url="http://127.0.0.1:3000", api_key=os.getenv("API_KEY", "your-secret-api-key"))

    print("\n⚡ Creating products concurrently...")
    results = await asyncio.gather(*(simulate_create(c, n) for n in range(10)))
    created = [p for p in results if p]

    ids = {p["id"] for p in created}
    print(f"\n🆔 {len(created)} created, {len(ids)} distinct ids")

    # Show final state
    print("\n📊 Stats:", c.product_stats())
    print("📦 Widgets:", c.query_products(category="widgets", limit=100)["total"])

if __name__ == "__main__":
    asyncio.run(main())
