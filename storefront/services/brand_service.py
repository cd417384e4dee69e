"""브랜드 관리 서비스."""

from typing import Any, Mapping

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.core.exceptions import (
    BrandAlreadyExistsException,
    BrandInUseException,
    BrandNotFoundException,
)
from storefront.core.identifiers import parse_id
from storefront.core.messages import ALL_BRANDS_FETCHED, BRANDS_FETCHED
from storefront.core.slug import normalize
from storefront.models import Brand, Product
from storefront.schemas.brand import BrandCreateRequest, BrandUpdateRequest
from storefront.schemas.common import Pagination
from storefront.services.product_query import escape_like, first_value, page_window

logger = structlog.get_logger()

DEFAULT_BRAND_PAGE_SIZE = 10

BRAND_SORT_FIELDS = {
    "name": Brand.name,
    "createdAt": Brand.created_at,
    "updatedAt": Brand.updated_at,
    "productCount": Brand.product_count,
}


def _descending(sort_order: Any) -> bool:
    # -1/1 또는 desc/asc 모두 허용
    text = str(sort_order).strip().lower()
    return text not in ("1", "asc")


class BrandService:
    """브랜드 생성, 조회, 수정, 삭제 서비스."""

    @staticmethod
    def create_brand(request: BrandCreateRequest, db: Session) -> Brand:
        """
        브랜드를 생성합니다.

        Raises:
            BrandAlreadyExistsException: 같은 이름 또는 같은 slug의 브랜드가 있는 경우 (409)
        """
        name = request.name.strip()
        if BrandService._find_conflict(db, name) is not None:
            raise BrandAlreadyExistsException(name)

        brand = Brand(name=name)
        db.add(brand)
        db.commit()
        db.refresh(brand)

        logger.info("Brand created", brand_id=str(brand.id), slug=brand.slug)
        return brand

    @staticmethod
    def list_brands(params: Mapping[str, Any], db: Session) -> dict:
        """
        브랜드 목록을 조회합니다.

        limit이 주어지면 페이지네이션 결과를, 없으면 전체 목록을 반환합니다.

        Returns:
            {"message", "brands", "pagination"} 또는 {"message", "brands", "totalItems"}

        Raises:
            InvalidFilterException: page/limit 값이 잘못된 경우 (400)
        """
        search = str(first_value(params.get("search")) or "").strip()
        statement = select(Brand)
        if search:
            statement = statement.where(Brand.name.ilike(f"%{escape_like(search)}%", escape="\\"))

        sort_by = first_value(params.get("sortBy")) or "createdAt"
        sort_order = first_value(params.get("sortOrder", -1))
        column = BRAND_SORT_FIELDS.get(str(sort_by), Brand.created_at)
        ordered = column.desc() if _descending(sort_order) else column.asc()
        statement = statement.order_by(ordered, Brand.id)

        total = db.execute(
            select(func.count()).select_from(statement.order_by(None).subquery())
        ).scalar_one()

        limit = first_value(params.get("limit"))
        if limit in (None, ""):
            brands = db.execute(statement).scalars().all()
            return {"message": ALL_BRANDS_FETCHED, "brands": list(brands), "totalItems": total}

        window = page_window(first_value(params.get("page")), limit, DEFAULT_BRAND_PAGE_SIZE)
        brands = db.execute(
            statement.offset(window.offset).limit(window.limit)
        ).scalars().all()
        message = f'{BRANDS_FETCHED} matching "{search}"' if search else BRANDS_FETCHED
        return {
            "message": message,
            "brands": list(brands),
            "pagination": Pagination.build(window.page, window.limit, total),
        }

    @staticmethod
    def get_brand(brand_id: Any, db: Session) -> Brand:
        """
        브랜드를 조회합니다.

        Raises:
            BrandNotFoundException: 브랜드가 없거나 ID 형식이 잘못된 경우 (404)
        """
        parsed = parse_id(brand_id)
        brand = db.get(Brand, parsed) if parsed is not None else None
        if brand is None:
            raise BrandNotFoundException(brand_id)
        return brand

    @staticmethod
    def update_brand(brand_id: Any, request: BrandUpdateRequest, db: Session) -> Brand:
        """
        브랜드명을 수정합니다. slug는 새 이름으로 다시 계산됩니다.

        Raises:
            BrandNotFoundException: 브랜드가 없는 경우 (404)
            BrandAlreadyExistsException: 다른 브랜드가 같은 이름이나 slug를 쓰는 경우 (409)
        """
        brand = BrandService.get_brand(brand_id, db)

        if request.name:
            name = request.name.strip()
            if BrandService._find_conflict(db, name, exclude_id=brand.id) is not None:
                raise BrandAlreadyExistsException(name)
            brand.name = name

        db.commit()
        db.refresh(brand)

        logger.info("Brand updated", brand_id=str(brand.id), slug=brand.slug)
        return brand

    @staticmethod
    def delete_brand(brand_id: Any, db: Session) -> None:
        """
        브랜드를 삭제합니다.

        Raises:
            BrandNotFoundException: 브랜드가 없는 경우 (404)
            BrandInUseException: 브랜드를 참조하는 상품이 있는 경우 (400)
        """
        brand = BrandService.get_brand(brand_id, db)

        in_use = db.execute(
            select(Product.id).where(Product.brand_id == brand.id).limit(1)
        ).first()
        if in_use is not None:
            raise BrandInUseException(brand.id)

        db.delete(brand)
        db.commit()
        logger.info("Brand deleted", brand_id=str(brand_id))

    @staticmethod
    def _find_conflict(db: Session, name: str, exclude_id=None) -> Brand | None:
        """이름 또는 이름에서 파생된 slug가 같은 다른 브랜드를 찾습니다."""
        statement = select(Brand).where(or_(Brand.name == name, Brand.slug == normalize(name)))
        if exclude_id is not None:
            statement = statement.where(Brand.id != exclude_id)
        return db.execute(statement.limit(1)).scalars().first()
