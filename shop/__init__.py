"""Jewelry catalog data layer: models, remote store client and shop state."""

__version__ = "0.1.0"

from shop.catalog import filter_products, group_by_collection, parse_price, sort_products
from shop.config import SENTINEL_COLLECTION
from shop.exceptions import (
    AuthError,
    MutationError,
    NotFoundError,
    RemoteDataError,
    RemoteStoreError,
    ShopError,
    ValidationError,
)
from shop.fallback import FallbackStore
from shop.models import (
    CategoryData,
    Classification,
    CollectionData,
    MaterialData,
    Product,
    SiteConfig,
    SocialLink,
)
from shop.remote import AuthClient, RemoteStoreClient
from shop.state import BulkResult, ShopStore

__all__ = [
    # Version
    "__version__",
    # Config
    "SENTINEL_COLLECTION",
    # Models
    "Product",
    "Classification",
    "CollectionData",
    "CategoryData",
    "MaterialData",
    "SiteConfig",
    "SocialLink",
    # Store
    "ShopStore",
    "BulkResult",
    "FallbackStore",
    "RemoteStoreClient",
    "AuthClient",
    # Catalog queries
    "filter_products",
    "sort_products",
    "group_by_collection",
    "parse_price",
    # Errors
    "ShopError",
    "RemoteStoreError",
    "RemoteDataError",
    "AuthError",
    "MutationError",
    "ValidationError",
    "NotFoundError",
]
