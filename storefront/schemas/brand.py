"""
브랜드 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field


class BrandCreateRequest(BaseModel):
    """
    브랜드 생성 요청 스키마

    Example:
        {"name": "Northwind Outfitters"}
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="브랜드명",
        examples=["Northwind Outfitters"],
    )


class BrandUpdateRequest(BaseModel):
    """브랜드 수정 요청 스키마 (name 생략 시 변경 없음)"""

    name: str | None = Field(None, min_length=1, max_length=100, description="브랜드명")
