"""
Brand 모델
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import validates

from storefront.core.slug import normalize
from storefront.db.database import Base
from storefront.models.base import TimestampMixin, uuid_pk


class Brand(TimestampMixin, Base):
    """
    브랜드 모델

    Attributes:
        id: 브랜드 고유 ID (UUID)
        name: 브랜드명 (Unique, Not Null, 최대 100자)
        slug: name에서 파생된 URL용 식별자 (Unique)
        product_count: 이 브랜드를 참조하는 상품 수 (비정규화 카운터)
        created_at: 생성 일시 (자동 설정)
        updated_at: 수정 일시 (자동 업데이트)
    """

    __tablename__ = "brands"

    id = uuid_pk()
    name = Column(String(100), unique=True, nullable=False, index=True)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    product_count = Column(Integer, nullable=False, default=0)

    @validates("name")
    def _derive_slug(self, key, value):
        """name이 바뀌면 slug를 다시 계산합니다."""
        value = value.strip() if value else value
        self.slug = normalize(value)
        return value

    def to_document(self) -> dict:
        return {
            "_id": self.id,
            "name": self.name,
            "slug": self.slug,
            "productCount": self.product_count,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def summary(self) -> dict:
        return {"_id": self.id, "name": self.name, "slug": self.slug}

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, name='{self.name}')>"
