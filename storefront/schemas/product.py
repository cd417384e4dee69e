"""
상품 요청 본문 파싱 스키마

multipart 폼 필드는 JSON 문자열, 이미 파싱된 값, 쉼표 구분 문자열 중 어느 형태로든
들어올 수 있습니다. 이 모듈은 필드별로 한 가지 대체(fallback) 정책을 정의하고,
요청 본문을 한 번에 타입이 있는 중간 구조(ProductCreatePayload / ProductUpdatePayload)로
변환합니다.

필드별 정책:
    tags, collections: JSON 배열/문자열 또는 쉼표 구분 문자열 -> slug 목록 (중복 제거)
    specifications:    JSON 객체 또는 "key: value" 문자열 -> dict, 해석 불가 시 None
    variants:          JSON 배열/객체, JSON 문자열 목록 -> 변형 목록, 해석 불가 시 오류
    sizes:             JSON 배열 또는 목록 -> 사이즈 목록
"""

import json
import uuid
from typing import Any, Mapping

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from storefront.core.exceptions import (
    InvalidReferenceException,
    ProductValidationException,
)
from storefront.core.slug import normalize

_UNPARSED = object()


def _loads(value: str) -> Any:
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return _UNPARSED


def parse_labels(value: Any) -> list[str] | None:
    """
    태그/컬렉션 입력을 정규화된 slug 목록으로 변환합니다.

    Example:
        >>> parse_labels('["Summer Sale", "new"]')
        ['summer-sale', 'new']
        >>> parse_labels("Summer Sale, New")
        ['summer-sale', 'new']
    """
    if value is None:
        return None

    if isinstance(value, str):
        parsed = _loads(value)
        if parsed is _UNPARSED:
            items = value.split(",")
        elif isinstance(parsed, list):
            items = parsed
        else:
            items = [parsed]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = [value]

    labels = []
    for item in items:
        label = normalize(item if isinstance(item, str) else str(item))
        if label and label not in labels:
            labels.append(label)
    return labels


def parse_specifications(value: Any) -> dict | None:
    """사양 입력을 dict로 변환합니다. 해석할 수 없으면 None (기존 값 유지)."""
    if value is None or isinstance(value, dict):
        return value

    if isinstance(value, str):
        parsed = _loads(value)
        if isinstance(parsed, dict):
            return parsed
        if parsed is _UNPARSED and ":" in value:
            key, _, spec_value = value.partition(":")
            if key.strip() and spec_value.strip():
                return {key.strip(): spec_value.strip()}

    return None


def parse_variants(value: Any) -> list | None:
    """변형 입력을 dict 목록으로 펼칩니다. 해석할 수 없는 문자열은 ValueError."""
    if value is None:
        return None

    items = value if isinstance(value, (list, tuple)) else [value]
    variants = []
    for item in items:
        if isinstance(item, str):
            parsed = _loads(item)
            if parsed is _UNPARSED:
                raise ValueError(f"Invalid variants format: {item}")
            item = parsed
        if isinstance(item, list):
            variants.extend(item)
        elif isinstance(item, dict):
            variants.append(item)
        else:
            raise ValueError(f"Invalid variants format: {item}")
    return variants


class SizePayload(BaseModel):
    """사이즈별 재고 (예: {"size": "M", "quantity": 5})"""

    size: str = Field(..., min_length=1, max_length=20)
    quantity: int = Field(0, ge=0)


class VariantPayload(BaseModel):
    """
    변형 요청 항목

    기존 변형을 수정하려면 _id, 새 변형을 추가하려면 color를 지정합니다.
    """

    id: uuid.UUID | None = Field(None, validation_alias=AliasChoices("_id", "id"))
    color: uuid.UUID | None = None
    price: float | None = Field(None, ge=0)
    sizes: list[SizePayload] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _variant_id(cls, value):
        if value in (None, ""):
            return None
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise ValueError(f"Invalid variant ID: {value}")

    @field_validator("color", mode="before")
    @classmethod
    def _color_reference(cls, value):
        # 이전 응답을 그대로 되돌려 보낸 클라이언트는 {"_id", "name", "hex"} 객체를 보냄
        if isinstance(value, dict):
            raise ValueError("Variant color must be a string ID, not an object")
        if value in (None, ""):
            return None
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise ValueError(f"Invalid color ID in variant: {value}")

    @field_validator("sizes", mode="before")
    @classmethod
    def _sizes(cls, value):
        if isinstance(value, str):
            parsed = _loads(value)
            if not isinstance(parsed, list):
                raise ValueError(f"Invalid sizes format: {value}")
            return parsed
        return value

    @model_validator(mode="after")
    def _id_or_color(self):
        if self.id is None and self.color is None:
            raise ValueError(
                "Each variant must have either an _id (for updates) "
                "or a color (for new variants)"
            )
        return self


class _ProductPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("tags", "collections", mode="before", check_fields=False)
    @classmethod
    def _labels(cls, value):
        return parse_labels(value)

    @field_validator("specifications", mode="before", check_fields=False)
    @classmethod
    def _specifications(cls, value):
        return parse_specifications(value)

    @field_validator("variants", mode="before", check_fields=False)
    @classmethod
    def _variants(cls, value):
        return parse_variants(value)


class ProductCreatePayload(_ProductPayload):
    """
    상품 생성 요청 (파싱 완료)

    Example:
        {
            "name": "Linen Shirt",
            "category": "7d0c...",
            "brand": "1b9e...",
            "base_price": 49.9,
            "variants": [{"color": "a3f1...", "price": 49.9,
                          "sizes": [{"size": "M", "quantity": 5}]}],
            "tags": "summer, linen"
        }
    """

    name: str = Field(..., min_length=1, max_length=200)
    category: uuid.UUID
    brand: uuid.UUID
    base_price: float = Field(..., ge=0)
    description: str | None = None
    variants: list[VariantPayload] = Field(..., min_length=1)
    is_active: bool = Field(True, alias="isActive")
    is_visible: bool = Field(True, alias="isVisible")
    is_featured: bool = Field(False, alias="isFeatured")
    is_sold_out: bool = Field(False, alias="isSoldOut")
    tags: list[str] | None = None
    specifications: dict | None = None
    collections: list[str] | None = None
    discount: float = Field(0, ge=0)
    video_url: str | None = Field(None, alias="videoUrl")

    @field_validator("discount", mode="before")
    @classmethod
    def _discount_default(cls, value):
        return 0 if value in (None, "") else value

    @model_validator(mode="after")
    def _variants_need_color(self):
        for variant in self.variants:
            if variant.color is None:
                raise ValueError("Each new variant must have a color")
        return self

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> "ProductCreatePayload":
        """
        요청 본문을 검증하고 파싱합니다.

        Raises:
            ProductValidationException: 필수 필드 누락 또는 변형이 없는 경우 (422)
            InvalidReferenceException: ID 형식, 값 범위, 변형 형식이 잘못된 경우 (400)
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as error:
            raise _translate(error, required=True)


class ProductUpdatePayload(_ProductPayload):
    """상품 수정 요청 (파싱 완료, None인 필드는 변경하지 않음)"""

    name: str | None = Field(None, min_length=1, max_length=200)
    category: uuid.UUID | None = None
    brand: uuid.UUID | None = None
    base_price: float | None = Field(None, ge=0)
    description: str | None = None
    variants: list[VariantPayload] | None = None
    is_active: bool | None = Field(None, alias="isActive")
    is_visible: bool | None = Field(None, alias="isVisible")
    is_featured: bool | None = Field(None, alias="isFeatured")
    is_sold_out: bool | None = Field(None, alias="isSoldOut")
    tags: list[str] | None = None
    specifications: dict | None = None
    collections: list[str] | None = None
    discount: float | None = Field(None, ge=0)
    video_url: str | None = Field(None, alias="videoUrl")

    @field_validator(
        "name", "category", "brand", "base_price", "discount", mode="before"
    )
    @classmethod
    def _blank_is_unchanged(cls, value):
        return None if value == "" else value

    @classmethod
    def from_request(cls, data: Mapping[str, Any]) -> "ProductUpdatePayload":
        """
        수정 요청 본문을 검증하고 파싱합니다.

        Raises:
            InvalidReferenceException: 변형/ID/값 형식이 잘못된 경우 (400)
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as error:
            raise _translate(error, required=False)


def _error_message(error: dict) -> str:
    ctx_error = error.get("ctx", {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)

    field = ".".join(str(part) for part in error["loc"]) or "body"
    return f"Invalid {field}: {error['msg']}"


def _translate(error: ValidationError, required: bool) -> Exception:
    """pydantic ValidationError를 카탈로그 예외로 변환합니다."""
    errors = error.errors()

    if required:
        for item in errors:
            if item["loc"] and item["loc"][0] == "variants" and item["type"] in (
                "missing",
                "too_short",
            ):
                return ProductValidationException("At least one variant is required")
        missing = [
            str(item["loc"][0])
            for item in errors
            if len(item["loc"]) == 1
            and (item["type"] == "missing" or item.get("input") in ("", None))
        ]
        if missing:
            return ProductValidationException(
                f"Missing required fields: {', '.join(missing)}"
            )

    return InvalidReferenceException("; ".join(_error_message(item) for item in errors))
