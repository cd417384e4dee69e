"""
공통 응답 스키마

모든 엔드포인트는 {statusCode, message, data} 형태의 응답 봉투를 사용합니다.
"""

from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """
    응답 봉투 스키마

    Example:
        {
            "statusCode": 200,
            "message": "Products fetched successfully",
            "data": {...}
        }
    """

    statusCode: int = Field(..., description="HTTP 상태 코드")
    message: str = Field(..., description="사람이 읽을 수 있는 결과 메시지")
    data: Any = Field(None, description="응답 데이터 (오류/삭제 응답에서는 생략)")


class Pagination(BaseModel):
    """페이지네이션 정보"""

    currentPage: int
    totalPages: int
    totalItems: int
    limit: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(currentPage=page, totalPages=total_pages, totalItems=total, limit=limit)
