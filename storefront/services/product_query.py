"""
상품 필터 쿼리 빌더

타입이 없는 요청 파라미터 맵을 상품 테이블에 대한 SQLAlchemy 조건식, 정렬,
페이지 윈도우, 적용된 필터 요약으로 변환합니다.

전체 개수 쿼리(count_statement)와 페이지 조회 쿼리(page_statement)는 같은
조건식에서 만들어지므로 totalItems와 실제 페이지 내용이 어긋나지 않습니다.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping

from sqlalchemy import and_, func, not_, or_, select, true
from sqlalchemy.orm import Session

from storefront.core.exceptions import InvalidFilterException
from storefront.core.identifiers import parse_id
from storefront.core.messages import PRODUCTS_FETCHED
from storefront.core.slug import normalize
from storefront.models import (
    Category,
    Product,
    ProductCollection,
    ProductTag,
    ProductVariant,
    VariantSize,
)


# 정렬 허용 목록 (그 외 값은 생성일 내림차순)
SORT_FIELDS = {
    "createdAt": Product.created_at,
    "created_at": Product.created_at,
    "base_price": Product.base_price,
    "rating": Product.rating,
    "viewCount": Product.view_count,
    "view_count": Product.view_count,
    "name": Product.name,
}

# 한 페이지 최대 크기와 허용 offset 상한
MAX_PAGE_SIZE = 100
MAX_OFFSET = 2**31 - 1

_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


def split_filter_values(value: Any) -> list[str]:
    """
    다중 값 파라미터를 목록으로 변환합니다 (반복 키 또는 쉼표 구분).

    Example:
        >>> split_filter_values(["M, L", "XL"])
        ['M', 'L', 'XL']
    """
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]

    values = []
    for item in items:
        if item is None:
            continue
        values.extend(part.strip() for part in str(item).split(",") if part.strip())
    return values


def escape_like(term: str) -> str:
    """LIKE 패턴 특수문자(%, _, \\)를 이스케이프합니다."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_flag(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidFilterException(f"Invalid {name} value: {value}")


def first_value(value: Any) -> Any:
    """반복 키로 목록이 된 파라미터에서 첫 값을 꺼냅니다."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _present(params: Mapping[str, Any], key: str) -> bool:
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        return any(str(item).strip() for item in value)
    return value is not None and str(value).strip() != ""


@dataclass
class PageWindow:
    """페이지 윈도우 ((page-1) * limit, limit)"""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_window(page: Any, limit: Any, default_page_size: int) -> PageWindow:
    """
    page/limit 파라미터를 검증해 PageWindow를 만듭니다.

    limit은 MAX_PAGE_SIZE로 제한되고, offset이 MAX_OFFSET을 넘으면 거부합니다.

    Raises:
        InvalidFilterException: 숫자가 아니거나 1 미만, 범위를 벗어난 페이지 (400)
    """
    try:
        page = int(page) if page not in (None, "") else 1
        limit = int(limit) if limit not in (None, "") else default_page_size
    except (TypeError, ValueError):
        raise InvalidFilterException("Invalid page or limit value")

    if page < 1 or limit < 1:
        raise InvalidFilterException("Invalid page or limit value")

    window = PageWindow(page=page, limit=min(limit, MAX_PAGE_SIZE))
    if window.offset > MAX_OFFSET:
        raise InvalidFilterException("Page number is out of range")
    return window


@dataclass
class ProductQuery:
    """빌더 결과: 조건식, 정렬, 페이지 윈도우, 요약"""

    conditions: list
    order_by: list
    window: PageWindow
    summary: str
    applied_filters: dict = field(default_factory=dict)

    @property
    def predicate(self):
        return and_(true(), *self.conditions)

    def count_statement(self):
        return select(func.count()).select_from(Product).where(self.predicate)

    def page_statement(self):
        return (
            select(Product)
            .where(self.predicate)
            .order_by(*self.order_by)
            .offset(self.window.offset)
            .limit(self.window.limit)
        )

    def count(self, db: Session) -> int:
        return db.execute(self.count_statement()).scalar_one()

    def fetch(self, db: Session) -> list[Product]:
        return list(db.execute(self.page_statement()).scalars().all())


class ProductQueryBuilder:
    """
    요청 파라미터 -> ProductQuery 변환기.

    지원 파라미터: search, category, minPrice, maxPrice, tags, colors, brands,
    collections, size, available, soldOut, sortBy, sortOrder, page, limit.

    사용 예:
        query = ProductQueryBuilder(db).build(
            {"colors": "a3f1...,b7c2...", "minPrice": "10", "page": "2"},
            base_conditions=[Product.is_visible.is_(True)],
            price_scope="variant",
        )
        total = query.count(db)
        products = query.fetch(db)
    """

    def __init__(self, db: Session, default_page_size: int = 12):
        self.db = db
        self.default_page_size = default_page_size

    def build(
        self,
        params: Mapping[str, Any],
        base_conditions: Iterable = (),
        price_scope: Literal["base", "variant"] = "base",
        match_all_tags: bool = False,
    ) -> ProductQuery:
        """
        파라미터를 검증하고 ProductQuery를 만듭니다.

        Raises:
            InvalidFilterException: 잘못된 카테고리, 색상/브랜드 ID, 가격 범위,
                페이지 값, 플래그 값 (400)
        """
        window = self._window(params)
        conditions = list(base_conditions)
        summary = [PRODUCTS_FETCHED]
        applied = {}

        search = first_value(params.get("search"))
        if search and str(search).strip():
            term = str(search).strip()
            pattern = f"%{escape_like(term)}%"
            conditions.append(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                    Product.tag_rows.any(ProductTag.value.ilike(pattern, escape="\\")),
                )
            )
            summary.append(f'matching "{term}"')
            applied["search"] = term

        category = first_value(params.get("category"))
        if category and str(category).strip():
            category = str(category).strip()
            conditions.append(Product.category_id == self.resolve_category(category))
            summary.append(f'in category "{category}"')
            applied["category"] = category

        if _present(params, "size"):
            sizes = split_filter_values(params["size"])
            conditions.append(
                Product.variants.any(ProductVariant.sizes.any(VariantSize.size.in_(sizes)))
            )
            summary.append(f'with sizes "{", ".join(sizes)}"')
            applied["size"] = sizes

        if _present(params, "colors"):
            colors = self._ids(params["colors"], "color")
            conditions.append(Product.variants.any(ProductVariant.color_id.in_(colors)))
            summary.append(f'with colors "{", ".join(str(c) for c in colors)}"')
            applied["colors"] = [str(color) for color in colors]

        if _present(params, "brands"):
            brands = self._ids(params["brands"], "brand")
            conditions.append(Product.brand_id.in_(brands))
            summary.append(f'with brands "{", ".join(str(b) for b in brands)}"')
            applied["brands"] = [str(brand) for brand in brands]

        if _present(params, "collections"):
            collections = self._labels(params["collections"])
            if collections:
                conditions.append(
                    Product.collection_rows.any(ProductCollection.value.in_(collections))
                )
                summary.append(f'with collections "{", ".join(collections)}"')
                applied["collections"] = collections

        if _present(params, "tags"):
            tags = self._labels(params["tags"])
            if tags:
                if match_all_tags:
                    conditions.extend(
                        Product.tag_rows.any(ProductTag.value == tag) for tag in tags
                    )
                else:
                    conditions.append(Product.tag_rows.any(ProductTag.value.in_(tags)))
                summary.append(f'with tags "{", ".join(tags)}"')
                applied["tags"] = tags

        price_condition = self._price(params, price_scope, summary, applied)
        if price_condition is not None:
            conditions.append(price_condition)

        if _present(params, "available"):
            available = parse_flag(first_value(params["available"]), "available")
            in_stock = Product.variants.any(
                ProductVariant.sizes.any(VariantSize.quantity > 0)
            )
            conditions.append(in_stock if available else not_(in_stock))
            summary.append("available products" if available else "unavailable products")
            applied["available"] = available

        if _present(params, "soldOut"):
            sold_out = parse_flag(first_value(params["soldOut"]), "soldOut")
            conditions.append(Product.is_sold_out.is_(sold_out))
            summary.append("sold out products" if sold_out else "not sold out products")
            applied["soldOut"] = sold_out

        return ProductQuery(
            conditions=conditions,
            order_by=self._order_by(params),
            window=window,
            summary=" ".join(summary),
            applied_filters=applied,
        )

    def _window(self, params: Mapping[str, Any]) -> PageWindow:
        return page_window(
            first_value(params.get("page")),
            first_value(params.get("limit")),
            self.default_page_size,
        )

    def resolve_category(self, token: str):
        """카테고리 ID 또는 활성 카테고리 slug를 ID로 해석합니다."""
        category_id = parse_id(token)
        if category_id is not None:
            return category_id

        category_id = self.db.execute(
            select(Category.id).where(Category.slug == token, Category.is_active.is_(True))
        ).scalar_one_or_none()
        if category_id is None:
            raise InvalidFilterException("Invalid category")
        return category_id

    @staticmethod
    def _ids(value: Any, kind: str) -> list:
        # 하나라도 형식이 틀리면 요청 전체를 거부
        raw = split_filter_values(value)
        ids = [parse_id(item) for item in raw]
        if not ids or any(item is None for item in ids):
            raise InvalidFilterException(f"Invalid {kind} ID(s)")
        return ids

    @staticmethod
    def _labels(value: Any) -> list[str]:
        labels = []
        for item in split_filter_values(value):
            label = normalize(item)
            if label and label not in labels:
                labels.append(label)
        return labels

    @staticmethod
    def _price(params, price_scope, summary: list, applied: dict):
        bounds = {}
        for key in ("minPrice", "maxPrice"):
            if not _present(params, key):
                continue
            raw = first_value(params[key])
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise InvalidFilterException(f"Invalid {key} value: {raw}")
            if not math.isfinite(value):
                raise InvalidFilterException(f"Invalid {key} value: {raw}")
            bounds[key] = value

        if not bounds:
            return None

        min_price = bounds.get("minPrice")
        max_price = bounds.get("maxPrice")
        if min_price is not None and min_price < 0:
            raise InvalidFilterException("Minimum price cannot be negative")
        if max_price is not None and max_price < 0:
            raise InvalidFilterException("Maximum price cannot be negative")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidFilterException(
                "Minimum price cannot be greater than maximum price"
            )

        column = ProductVariant.price if price_scope == "variant" else Product.base_price
        clauses = []
        if min_price is not None:
            clauses.append(column >= min_price)
            summary.append(f"with price >= {min_price:g}")
            applied["minPrice"] = min_price
        if max_price is not None:
            clauses.append(column <= max_price)
            summary.append(f"with price <= {max_price:g}")
            applied["maxPrice"] = max_price

        if price_scope == "variant":
            # 같은 변형 하나가 두 경계를 모두 만족해야 함
            return Product.variants.any(and_(ProductVariant.price.is_not(None), *clauses))
        return and_(*clauses)

    @staticmethod
    def _order_by(params: Mapping[str, Any]) -> list:
        sort_by = first_value(params.get("sortBy")) or "createdAt"
        sort_order = str(first_value(params.get("sortOrder")) or "desc").lower()

        column = SORT_FIELDS.get(sort_by)
        if column is None:
            return [Product.created_at.desc(), Product.id]

        ordered = column.asc() if sort_order == "asc" else column.desc()
        # 같은 값이 많을 때도 페이지 경계가 흔들리지 않도록 ID를 보조 정렬 키로 사용
        return [ordered, Product.id]
