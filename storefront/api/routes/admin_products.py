"""
관리자 상품 API 엔드포인트

상품 생성/수정은 multipart/form-data(필드 + 변형 이미지) 또는 JSON 본문을 받습니다.
이미지 필드 이름은 variants[<변형 인덱스>][image], 대체 텍스트는
variants[<변형 인덱스>][imageAlt_<순번>] 형식입니다.
"""

from fastapi import APIRouter, Depends, status
from redis import Redis
from sqlalchemy.orm import Session

from storefront.api.deps import ProductBody, get_db, get_product_body, get_query_params
from storefront.core.config import Settings, get_settings
from storefront.core.messages import (
    PRODUCT_CREATED,
    PRODUCT_DELETED,
    PRODUCT_FETCHED,
    PRODUCT_UPDATED,
)
from storefront.core.projection import project
from storefront.db.redis_client import get_redis_client
from storefront.schemas.common import ApiResponse
from storefront.services.asset_store import AssetStore, get_asset_store
from storefront.services.product_service import ProductService

router = APIRouter()


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductBody = Depends(get_product_body),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client),
    settings: Settings = Depends(get_settings),
    asset_store: AssetStore = Depends(get_asset_store),
):
    """
    새 상품을 생성합니다.

    Example:
        Request (multipart/form-data):
            name=Linen Shirt
            category=7d0c...
            brand=1b9e...
            base_price=49.9
            variants=[{"color": "a3f1...", "price": 49.9, "sizes": [{"size": "M", "quantity": 5}]}]
            tags=summer, linen
            variants[0][image]=<file>
            variants[0][imageAlt_0]=Front view

        Response (201):
        ```json
        {
            "statusCode": 201,
            "message": "Product created successfully",
            "data": {"_id": "...", "slug": "linen-shirt", "category": {...}, ...}
        }
        ```

        Error (409):
        ```json
        {"statusCode": 409, "message": "Product with slug 'linen-shirt' already exists"}
        ```
    """
    product = ProductService.create_product(
        body.data, body.images, db, redis, settings, asset_store
    )
    return ApiResponse(
        statusCode=status.HTTP_201_CREATED,
        message=PRODUCT_CREATED,
        data=project(product.to_document()),
    )


@router.get("", response_model=ApiResponse)
def list_products(
    params: dict = Depends(get_query_params),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """관리자 상품 목록 (search, category, minPrice, maxPrice, tags, sortBy, sortOrder, page, limit)"""
    products, pagination, message = ProductService.list_products(params, db, settings)
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=message,
        data=project(
            {
                "products": [product.to_document() for product in products],
                "pagination": pagination.model_dump(),
            }
        ),
    )


@router.get("/search", response_model=ApiResponse)
def search_products(
    params: dict = Depends(get_query_params),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """관리자 상품 검색 (search 필수)"""
    products, pagination, message = ProductService.search_products(params, db, settings)
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=message,
        data=project(
            {
                "products": [product.to_document() for product in products],
                "pagination": pagination.model_dump(),
            }
        ),
    )


@router.get("/{product_id}", response_model=ApiResponse)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = ProductService.get_product(product_id, db)
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=PRODUCT_FETCHED,
        data=project(product.to_document()),
    )


@router.put("/{product_id}", response_model=ApiResponse)
def update_product(
    product_id: str,
    body: ProductBody = Depends(get_product_body),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client),
    settings: Settings = Depends(get_settings),
    asset_store: AssetStore = Depends(get_asset_store),
):
    """
    상품을 수정합니다.

    variants 항목은 _id가 있으면 기존 변형을 수정하고, color만 있으면 새 변형으로 추가합니다.
    """
    product = ProductService.update_product(
        product_id, body.data, body.images, db, redis, settings, asset_store
    )
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=PRODUCT_UPDATED,
        data=project(product.to_document()),
    )


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    asset_store: AssetStore = Depends(get_asset_store),
):
    """상품을 삭제하고 카테고리/브랜드/색상 카운터를 감소시킵니다."""
    ProductService.delete_product(product_id, db, asset_store)
    return {"statusCode": status.HTTP_200_OK, "message": PRODUCT_DELETED}
