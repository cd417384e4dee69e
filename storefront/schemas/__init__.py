"""
Pydantic 스키마 모듈
"""

from storefront.schemas.brand import BrandCreateRequest, BrandUpdateRequest
from storefront.schemas.common import ApiResponse, Pagination
from storefront.schemas.product import (
    ProductCreatePayload,
    ProductUpdatePayload,
    SizePayload,
    VariantPayload,
)

__all__ = [
    "ApiResponse",
    "BrandCreateRequest",
    "BrandUpdateRequest",
    "Pagination",
    "ProductCreatePayload",
    "ProductUpdatePayload",
    "SizePayload",
    "VariantPayload",
]
