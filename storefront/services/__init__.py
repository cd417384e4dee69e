"""비즈니스 로직 서비스."""

from storefront.services.brand_service import BrandService
from storefront.services.catalog_service import CatalogService
from storefront.services.counter_service import CounterService
from storefront.services.lock_service import LockService
from storefront.services.product_service import ProductService

__all__ = [
    "BrandService",
    "CatalogService",
    "CounterService",
    "LockService",
    "ProductService",
]
