"""
SQLAlchemy 데이터베이스 모델

모든 데이터베이스 모델을 이 모듈에서 import하여 export합니다.
"""

from storefront.models.brand import Brand
from storefront.models.category import Category
from storefront.models.color import Color
from storefront.models.product import (
    Product,
    ProductCollection,
    ProductTag,
    ProductVariant,
    VariantSize,
)

__all__ = [
    "Brand",
    "Category",
    "Color",
    "Product",
    "ProductCollection",
    "ProductTag",
    "ProductVariant",
    "VariantSize",
]
