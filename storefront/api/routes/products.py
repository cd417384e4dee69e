"""
고객용 상품 API 엔드포인트
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, get_query_params
from storefront.core.config import Settings, get_settings
from storefront.core.messages import (
    FILTER_OPTIONS_FETCHED,
    PRODUCT_FETCHED,
    PRODUCTS_FETCHED,
)
from storefront.core.projection import project
from storefront.schemas.common import ApiResponse
from storefront.services.catalog_service import CatalogService

router = APIRouter()


def _page(result: dict) -> dict:
    return {
        "products": [product.to_document() for product in result["products"]],
        "pagination": result["pagination"].model_dump(),
    }


@router.get("", response_model=ApiResponse)
def list_products(
    params: dict = Depends(get_query_params),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    노출 중인 상품 목록

    Query:
        search, category(ID 또는 slug), minPrice, maxPrice, tags, colors, brands,
        collections, size, sortBy, sortOrder, page, limit
    """
    result = CatalogService.list_products(params, db, settings)
    return ApiResponse(
        statusCode=status.HTTP_200_OK, message=result["message"], data=project(_page(result))
    )


@router.get("/search", response_model=ApiResponse)
def search_products(
    params: dict = Depends(get_query_params),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = CatalogService.search_products(params, db, settings)
    return ApiResponse(
        statusCode=status.HTTP_200_OK, message=result["message"], data=project(_page(result))
    )


@router.get("/filter", response_model=ApiResponse)
def filter_products(
    params: dict = Depends(get_query_params),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    상세 필터 (변형 가격 범위, available, soldOut 포함)

    Response data:
        products, relatedProducts, pagination, appliedFilters
    """
    result = CatalogService.filter_products(params, db, settings)
    data = _page(result)
    data["relatedProducts"] = [product.to_document() for product in result["relatedProducts"]]
    data["appliedFilters"] = result["appliedFilters"]
    return ApiResponse(statusCode=status.HTTP_200_OK, message=result["message"], data=project(data))


@router.get("/new-arrivals", response_model=ApiResponse)
def new_arrivals(params: dict = Depends(get_query_params), db: Session = Depends(get_db)):
    """신상품 (limit 기본 8, 최대 100 / tags 기본 "new" / includeCategory 기본 true)"""
    include_category = str(params.get("includeCategory", "true")).lower() == "true"
    products = CatalogService.new_arrivals(
        db,
        limit=params.get("limit"),
        tags=params.get("tags", "new"),
        include_category=include_category,
    )
    return ApiResponse(statusCode=status.HTTP_200_OK, message=PRODUCTS_FETCHED, data=project(products))


@router.get("/dealsofthemonth", response_model=ApiResponse)
def deals_of_the_month(db: Session = Depends(get_db)):
    products = CatalogService.deals_of_the_month(db)
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=f"{PRODUCTS_FETCHED} for Deals of the Month",
        data=project(products),
    )


@router.get("/allfilters", response_model=ApiResponse)
def filter_options(db: Session = Depends(get_db)):
    """스토어 필터 UI용 선택지 (카테고리, 색상, 브랜드, 사이즈, 컬렉션, 태그, 가격 범위)"""
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=FILTER_OPTIONS_FETCHED,
        data=project(CatalogService.filter_options(db)),
    )


@router.get("/{product_id}", response_model=ApiResponse)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = CatalogService.get_product(product_id, db)
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=PRODUCT_FETCHED,
        data=project(product.to_document()),
    )
