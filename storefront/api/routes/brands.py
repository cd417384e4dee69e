"""
브랜드 관리 API 엔드포인트
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, get_query_params
from storefront.core.messages import BRAND_CREATED, BRAND_DELETED, BRAND_FETCHED, BRAND_UPDATED
from storefront.core.projection import project
from storefront.schemas.brand import BrandCreateRequest, BrandUpdateRequest
from storefront.schemas.common import ApiResponse
from storefront.services.brand_service import BrandService

router = APIRouter()


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_brand(request: BrandCreateRequest, db: Session = Depends(get_db)):
    """
    새 브랜드를 생성합니다.

    Example:
        Request:
        ```json
        {"name": "Northwind Outfitters"}
        ```

        Response (201):
        ```json
        {
            "statusCode": 201,
            "message": "Brand created successfully",
            "data": {"_id": "...", "name": "Northwind Outfitters",
                     "slug": "northwind-outfitters", "productCount": 0, ...}
        }
        ```

        Error (409):
        ```json
        {"statusCode": 409, "message": "Brand with name 'Northwind Outfitters' already exists"}
        ```
    """
    brand = BrandService.create_brand(request, db)
    return ApiResponse(
        statusCode=status.HTTP_201_CREATED,
        message=BRAND_CREATED,
        data=project(brand.to_document()),
    )


@router.get("", response_model=ApiResponse)
def list_brands(params: dict = Depends(get_query_params), db: Session = Depends(get_db)):
    """
    브랜드 목록 (search, sortBy, sortOrder, page, limit)

    limit을 생략하면 전체 목록과 totalItems를, 지정하면 pagination을 반환합니다.
    """
    result = BrandService.list_brands(params, db)
    data = {"brands": [brand.to_document() for brand in result["brands"]]}
    if "pagination" in result:
        data["pagination"] = result["pagination"].model_dump()
    else:
        data["totalItems"] = result["totalItems"]
    return ApiResponse(statusCode=status.HTTP_200_OK, message=result["message"], data=project(data))


@router.get("/{brand_id}", response_model=ApiResponse)
def get_brand(brand_id: str, db: Session = Depends(get_db)):
    brand = BrandService.get_brand(brand_id, db)
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=BRAND_FETCHED,
        data=project(brand.to_document()),
    )


@router.put("/{brand_id}", response_model=ApiResponse)
def update_brand(brand_id: str, request: BrandUpdateRequest, db: Session = Depends(get_db)):
    brand = BrandService.update_brand(brand_id, request, db)
    return ApiResponse(
        statusCode=status.HTTP_200_OK,
        message=BRAND_UPDATED,
        data=project(brand.to_document()),
    )


@router.delete("/{brand_id}")
def delete_brand(brand_id: str, db: Session = Depends(get_db)):
    """브랜드를 삭제합니다. 상품이 참조 중이면 400을 반환합니다."""
    BrandService.delete_brand(brand_id, db)
    return {"statusCode": status.HTTP_200_OK, "message": BRAND_DELETED}
