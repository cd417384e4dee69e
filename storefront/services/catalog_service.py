"""
고객용 상품 조회 서비스

노출(isVisible) 상품만 대상으로 목록, 검색, 필터, 신상품, 이달의 딜,
필터 옵션, 상세 조회를 제공합니다.
"""

from typing import Any, Mapping

import structlog
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from storefront.core.config import Settings
from storefront.core.exceptions import (
    InvalidFilterException,
    InvalidReferenceException,
    NoProductsFoundException,
    ProductNotFoundException,
)
from storefront.core.identifiers import parse_id
from storefront.core.slug import tag_variants
from storefront.models import (
    Brand,
    Category,
    Color,
    Product,
    ProductCollection,
    ProductTag,
    ProductVariant,
    VariantSize,
)
from storefront.schemas.common import Pagination
from storefront.services.product_query import ProductQueryBuilder, split_filter_values
from storefront.services.product_service import ProductService

logger = structlog.get_logger()

RELATED_PRODUCTS_LIMIT = 4
DEALS_LIMIT = 5
NEW_ARRIVALS_DEFAULT_LIMIT = 8
NEW_ARRIVALS_MAX_LIMIT = 100

# appliedFilters 응답에 항상 포함되는 키 (적용되지 않은 필터는 None)
APPLIED_FILTER_KEYS = (
    "category",
    "size",
    "colors",
    "brands",
    "collections",
    "tags",
    "minPrice",
    "maxPrice",
    "available",
    "soldOut",
)


def _visible():
    return Product.is_visible.is_(True)


def _in_stock():
    return Product.is_sold_out.is_(False)


class CatalogService:
    """고객용 상품 조회 서비스"""

    @staticmethod
    def list_products(params: Mapping[str, Any], db: Session, settings: Settings) -> dict:
        """
        노출 중이고 품절이 아닌 상품 목록을 반환합니다.

        가격 필터는 base_price 기준이며, 태그는 하나라도 일치하면 포함됩니다.

        Returns:
            {"message": 요약 메시지, "products": [...], "pagination": Pagination}
        """
        query = ProductQueryBuilder(db, settings.default_page_size).build(
            params, base_conditions=[_visible(), _in_stock()]
        )
        total = query.count(db)
        return {
            "message": query.summary,
            "products": query.fetch(db),
            "pagination": Pagination.build(query.window.page, query.window.limit, total),
        }

    @staticmethod
    def search_products(params: Mapping[str, Any], db: Session, settings: Settings) -> dict:
        """
        고객용 상품 검색

        Raises:
            InvalidFilterException: 검색어가 없는 경우 (400)
        """
        search = params.get("search")
        if not search or not str(search).strip():
            raise InvalidFilterException("Search term is required")
        return CatalogService.list_products(params, db, settings)

    @staticmethod
    def filter_products(params: Mapping[str, Any], db: Session, settings: Settings) -> dict:
        """
        상세 필터 조회

        가격 범위는 변형 가격 기준이며, 한 변형이 최소/최대 조건을 모두 만족해야 합니다.
        카테고리/컬렉션/태그 필터가 있으면 현재 페이지에 없는 관련 상품을
        최대 4개까지 함께 반환합니다.

        Returns:
            {"message", "products", "relatedProducts", "pagination", "appliedFilters"}
        """
        builder = ProductQueryBuilder(db, settings.default_page_size)
        query = builder.build(params, base_conditions=[_visible()], price_scope="variant")
        total = query.count(db)
        products = query.fetch(db)

        applied = query.applied_filters
        related = []
        related_scope = []
        if "category" in applied:
            category_id = builder.resolve_category(applied["category"])
            related_scope.append(Product.category_id == category_id)
        if applied.get("collections"):
            related_scope.append(
                Product.collection_rows.any(ProductCollection.value.in_(applied["collections"]))
            )
        if applied.get("tags"):
            related_scope.append(Product.tag_rows.any(ProductTag.value.in_(applied["tags"])))

        if related_scope:
            conditions = [_visible(), or_(*related_scope)]
            page_ids = [product.id for product in products]
            if page_ids:
                conditions.append(Product.id.not_in(page_ids))
            price_condition = CatalogService._variant_price_condition(applied)
            if price_condition is not None:
                conditions.append(price_condition)

            related = list(
                db.execute(
                    select(Product)
                    .where(*conditions)
                    .order_by(Product.created_at.desc(), Product.id)
                    .limit(RELATED_PRODUCTS_LIMIT)
                ).scalars().all()
            )

        logger.debug(
            "Filter query executed",
            filters=applied,
            total=total,
            related=len(related),
        )
        return {
            "message": query.summary,
            "products": products,
            "relatedProducts": related,
            "pagination": Pagination.build(query.window.page, query.window.limit, total),
            "appliedFilters": {key: applied.get(key) for key in APPLIED_FILTER_KEYS},
        }

    @staticmethod
    def new_arrivals(
        db: Session,
        limit: Any = NEW_ARRIVALS_DEFAULT_LIMIT,
        tags: Any = "new",
        include_category: bool = True,
    ) -> list[dict]:
        """
        신상품 목록 (최신순)

        태그마다 원형/하이픈/공백 표기를 모두 검색합니다 (예: "new arrival",
        "new-arrival"). limit는 최대 100으로 제한됩니다.

        Raises:
            InvalidFilterException: limit이 양수가 아니거나 유효한 태그가 없는 경우 (400)
            NoProductsFoundException: 결과가 없는 경우 (404)
        """
        try:
            limit = int(limit) if limit not in (None, "") else NEW_ARRIVALS_DEFAULT_LIMIT
        except (TypeError, ValueError):
            raise InvalidFilterException("Invalid limit value")
        if limit < 1:
            raise InvalidFilterException("Invalid limit value")
        limit = min(limit, NEW_ARRIVALS_MAX_LIMIT)

        raw_tags = split_filter_values(tags) if tags not in (None, "") else ["new"]
        expanded = []
        for tag in raw_tags:
            for form in tag_variants(tag.lower()):
                if form not in expanded:
                    expanded.append(form)
        if not expanded:
            raise InvalidFilterException("No valid tags provided")

        products = db.execute(
            select(Product)
            .where(
                _visible(),
                _in_stock(),
                Product.tag_rows.any(ProductTag.value.in_(expanded)),
            )
            .order_by(Product.created_at.desc(), Product.id)
            .limit(limit)
        ).scalars().all()

        if not products:
            raise NoProductsFoundException()

        arrivals = []
        for product in products:
            document = {
                "_id": product.id,
                "name": product.name,
                "slug": product.slug,
                "base_price": product.base_price,
                "description": product.description,
                "isFeatured": product.is_featured,
                "tags": list(product.tags),
                "variants": [variant.to_document(populate=False) for variant in product.variants],
                "createdAt": product.created_at,
            }
            if include_category:
                document["category"] = product.category.summary() if product.category else None
            arrivals.append(document)
        return arrivals

    @staticmethod
    def deals_of_the_month(db: Session) -> list[dict]:
        """
        이달의 딜: 할인 중인 추천 상품 중 할인율 상위 5개.

        변형 목록 대신 첫 번째 변형의 첫 번째 이미지만 images로 내려줍니다.

        Raises:
            NoProductsFoundException: 결과가 없는 경우 (404)
        """
        products = db.execute(
            select(Product)
            .where(
                Product.is_featured.is_(True),
                _in_stock(),
                _visible(),
                Product.is_active.is_(True),
                Product.discount > 0,
            )
            .order_by(Product.discount.desc(), Product.id)
            .limit(DEALS_LIMIT)
        ).scalars().all()

        if not products:
            raise NoProductsFoundException()

        deals = []
        for product in products:
            first_variant = product.variants[0] if product.variants else None
            images = first_variant.images if first_variant is not None else []
            deals.append(
                {
                    "_id": product.id,
                    "name": product.name,
                    "slug": product.slug,
                    "base_price": product.base_price,
                    "discount": product.discount,
                    "images": dict(images[0]) if images else None,
                }
            )
        return deals

    @staticmethod
    def filter_options(db: Session) -> dict:
        """
        스토어 필터 UI에 필요한 선택지를 반환합니다.

        카테고리는 활성 카테고리 전체, 색상/브랜드/사이즈/컬렉션/태그와
        가격 범위는 노출 상품에서 실제로 쓰이는 값만 집계합니다.
        """
        visible_ids = select(Product.id).where(_visible())
        visible_variants = select(ProductVariant.id).where(
            ProductVariant.product_id.in_(visible_ids)
        )

        categories = db.execute(
            select(Category).where(Category.is_active.is_(True)).order_by(Category.name)
        ).scalars().all()
        colors = db.execute(
            select(Color)
            .where(Color.id.in_(
                select(ProductVariant.color_id).where(ProductVariant.product_id.in_(visible_ids))
            ))
            .order_by(Color.name)
        ).scalars().all()
        brands = db.execute(
            select(Brand)
            .where(Brand.id.in_(select(Product.brand_id).where(_visible())))
            .order_by(Brand.name)
        ).scalars().all()

        sizes = db.execute(
            select(VariantSize.size)
            .where(VariantSize.variant_id.in_(visible_variants))
            .distinct()
            .order_by(VariantSize.size)
        ).scalars().all()
        collections = db.execute(
            select(ProductCollection.value)
            .where(ProductCollection.product_id.in_(visible_ids))
            .distinct()
            .order_by(ProductCollection.value)
        ).scalars().all()
        tags = db.execute(
            select(ProductTag.value)
            .where(ProductTag.product_id.in_(visible_ids))
            .distinct()
            .order_by(ProductTag.value)
        ).scalars().all()

        min_price, max_price = db.execute(
            select(func.min(ProductVariant.price), func.max(ProductVariant.price)).where(
                ProductVariant.product_id.in_(visible_ids)
            )
        ).one()

        return {
            "categories": [category.summary() for category in categories],
            "colors": [color.summary() for color in colors],
            "brands": [brand.summary() for brand in brands],
            "sizes": list(sizes),
            "collections": list(collections),
            "tags": list(tags),
            "priceRange": {"min": min_price or 0, "max": max_price or 0},
        }

    @staticmethod
    def get_product(product_id: Any, db: Session) -> Product:
        """
        노출 중이고 품절이 아닌 상품을 조회하고 조회수를 1 증가시킵니다.

        Raises:
            InvalidReferenceException: 잘못된 상품 ID (400)
            ProductNotFoundException: 없거나 숨김/품절 상품 (404)
        """
        parsed = parse_id(product_id)
        if parsed is None:
            raise InvalidReferenceException("Invalid product ID")

        product = db.execute(
            select(Product).where(Product.id == parsed, _visible(), _in_stock())
        ).scalar_one_or_none()
        if product is None:
            raise ProductNotFoundException(product_id)

        ProductService.record_view(db, product)
        return product

    @staticmethod
    def _variant_price_condition(applied: dict):
        clauses = []
        if applied.get("minPrice") is not None:
            clauses.append(ProductVariant.price >= applied["minPrice"])
        if applied.get("maxPrice") is not None:
            clauses.append(ProductVariant.price <= applied["maxPrice"])
        if not clauses:
            return None
        return Product.variants.any(and_(*clauses))
