"""
FastAPI 의존성 주입 함수들

데이터베이스 세션, 쿼리 파라미터, 상품 요청 본문(multipart 또는 JSON) 파싱을 제공합니다.
"""

from dataclasses import dataclass, field
from typing import Any

from fastapi import Request
from starlette.datastructures import UploadFile

from storefront.core.exceptions import InvalidReferenceException
from storefront.db.database import get_db
from storefront.services.asset_store import UploadedImage

__all__ = ["ProductBody", "get_db", "get_query_params", "get_product_body"]


@dataclass
class ProductBody:
    """상품 생성/수정 요청 본문 (폼 필드 + 업로드 파일)"""

    data: dict[str, Any] = field(default_factory=dict)
    images: list[UploadedImage] = field(default_factory=list)


def _collect(items) -> dict[str, Any]:
    # 같은 키가 반복되면 목록으로 모음 (예: ?colors=a&colors=b)
    collected: dict[str, Any] = {}
    for key, value in items:
        if key in collected:
            current = collected[key]
            collected[key] = current + [value] if isinstance(current, list) else [current, value]
        else:
            collected[key] = value
    return collected


def get_query_params(request: Request) -> dict[str, Any]:
    """
    쿼리 스트링을 dict로 변환합니다. 반복된 키는 목록이 됩니다.

    사용 예:
        @router.get("/products")
        def list_products(params: dict = Depends(get_query_params)):
            ...
    """
    return _collect(request.query_params.multi_items())


async def get_product_body(request: Request) -> ProductBody:
    """
    multipart/form-data 또는 application/json 본문을 읽습니다.

    multipart의 파일 필드는 UploadedImage로, 나머지 필드는 data로 분리됩니다.

    Raises:
        InvalidReferenceException: JSON 본문이 객체가 아닌 경우 (400)
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        form = await request.form()
        fields = []
        images = []
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                images.append(
                    UploadedImage(
                        field=key,
                        filename=value.filename or "",
                        content=await value.read(),
                        content_type=value.content_type,
                    )
                )
            else:
                fields.append((key, value))
        return ProductBody(data=_collect(fields), images=images)

    raw = await request.body()
    if not raw.strip():
        return ProductBody()

    try:
        data = await request.json()
    except ValueError:
        raise InvalidReferenceException("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise InvalidReferenceException("Request body must be a JSON object")
    return ProductBody(data=data)
