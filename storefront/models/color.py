"""
Color 모델
"""

from sqlalchemy import Column, Integer, String

from storefront.db.database import Base
from storefront.models.base import TimestampMixin, uuid_pk


class Color(TimestampMixin, Base):
    """
    색상 모델

    상품과는 변형(variant)을 통해 N:M 관계를 가집니다.

    Attributes:
        id: 색상 고유 ID (UUID)
        name: 색상명
        hex: 색상 코드 (예: #FFFFFF)
        product_count: 이 색상을 쓰는 변형을 가진 상품 수 (상품당 1회 집계)
    """

    __tablename__ = "colors"

    id = uuid_pk()
    name = Column(String(50), nullable=False)
    hex = Column(String(7), nullable=True)
    product_count = Column(Integer, nullable=False, default=0)

    def summary(self) -> dict:
        return {"_id": self.id, "name": self.name, "hex": self.hex}

    def __repr__(self) -> str:
        return f"<Color(id={self.id}, name='{self.name}')>"
