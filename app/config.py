"""
Configuration for the product API.
Loads settings from environment variables (and an optional .env file).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_KEY = "your-secret-api-key"  # insecure, local testing only
STORE_BACKENDS = ("memory", "mongo")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings for the API server."""

    api_key: str = DEFAULT_API_KEY
    environment: str = "development"

    # Storage
    store_backend: str = "memory"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "productdb"
    mongodb_collection: str = "products"
    seed_products: bool = True

    # Validation
    strict_validation: bool = False

    # Server / logging
    log_level: str = "INFO"
    port: int = 3000

    @property
    def production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """Create settings from environment variables.

        Args:
            env_file: Optional path to .env file

        Returns:
            Settings: populated settings instance
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            api_key=os.getenv("API_KEY", DEFAULT_API_KEY),
            environment=os.getenv("APP_ENV", "development"),
            store_backend=os.getenv("STORE_BACKEND", "memory").lower(),
            mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
            mongodb_db=os.getenv("MONGODB_DB", "productdb"),
            mongodb_collection=os.getenv("MONGODB_COLLECTION", "products"),
            seed_products=_env_flag("SEED_PRODUCTS", "true"),
            strict_validation=_env_flag("STRICT_VALIDATION", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=int(os.getenv("PORT", "3000")),
        )

    def validate(self) -> "Settings":
        """Reject settings the server cannot start with.

        Raises:
            ValueError: on an unknown store backend or an empty API key
        """
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {self.store_backend!r}"
            )
        if not self.api_key:
            raise ValueError("API_KEY must not be empty")
        return self
