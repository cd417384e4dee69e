"""
Category 모델
"""

from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.orm import validates

from storefront.core.slug import normalize
from storefront.db.database import Base
from storefront.models.base import TimestampMixin, uuid_pk


class Category(TimestampMixin, Base):
    """
    카테고리 모델

    Attributes:
        id: 카테고리 고유 ID (UUID)
        name: 카테고리명
        slug: URL용 식별자 (Unique), 고객 필터에서 ID 대신 사용 가능
        description: 설명 (Nullable)
        is_active: 활성 여부 (slug 조회 시 활성 카테고리만 대상)
        product_count: 이 카테고리에 속한 상품 수 (비정규화 카운터)
    """

    __tablename__ = "categories"

    id = uuid_pk()
    name = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    product_count = Column(Integer, nullable=False, default=0)

    @validates("name")
    def _derive_slug(self, key, value):
        if not self.slug:
            self.slug = normalize(value)
        return value

    def summary(self) -> dict:
        return {"_id": self.id, "name": self.name, "slug": self.slug}

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}')>"
