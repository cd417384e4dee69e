"""
Product 모델

상품(Product)은 집계 루트이며 변형(ProductVariant), 변형별 사이즈 재고(VariantSize),
태그(ProductTag), 컬렉션(ProductCollection) 행을 독점적으로 소유합니다.
소유 관계는 delete-orphan cascade로 표현되어 상품과 함께 삭제됩니다.
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

from storefront.db.database import Base
from storefront.models.base import TimestampMixin, uuid_pk


class ProductTag(Base):
    """상품 태그 (정규화된 slug 토큰)"""

    __tablename__ = "product_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value = Column(String(100), nullable=False, index=True)


class ProductCollection(Base):
    """상품이 속한 컬렉션 라벨"""

    __tablename__ = "product_collections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value = Column(String(100), nullable=False, index=True)


class VariantSize(Base):
    """변형의 사이즈별 재고 수량"""

    __tablename__ = "variant_sizes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    variant_id = Column(
        Uuid,
        ForeignKey("product_variants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    size = Column(String(20), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)

    def to_document(self) -> dict:
        return {"size": self.size, "quantity": self.quantity}


class ProductVariant(Base):
    """
    상품 변형 (색상/가격/사이즈/이미지 조합)

    Attributes:
        id: 상품 내에서 유일한 변형 ID (수정 시 병합 기준)
        product_id: 소유 상품 ID
        position: 상품 내 순서 (업로드 파일의 슬롯 인덱스와 대응)
        color_id: 색상 참조
        price: 변형 가격
        sizes: 사이즈별 재고 목록
        images: [{url, public_id, alt, is_primary}] 목록 (JSON)
    """

    __tablename__ = "product_variants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    color_id = Column(Uuid, ForeignKey("colors.id"), nullable=True, index=True)
    price = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    images = Column(JSON, nullable=False, default=list)

    product = relationship("Product", back_populates="variants")
    color = relationship("Color")
    sizes = relationship(
        "VariantSize",
        order_by="VariantSize.id",
        cascade="all, delete-orphan",
    )

    def to_document(self, populate: bool = True) -> dict:
        if populate and self.color is not None:
            color = self.color.summary()
        else:
            color = self.color_id

        return {
            "_id": self.id,
            "color": color,
            "price": self.price,
            "sizes": [size.to_document() for size in self.sizes],
            "images": [dict(image) for image in (self.images or [])],
        }


class Product(TimestampMixin, Base):
    """
    상품 모델

    Attributes:
        id: 상품 고유 ID (UUID)
        name: 상품명
        slug: name에서 파생된 고유 식별자 (Unique)
        category_id: 카테고리 참조
        brand_id: 브랜드 참조
        base_price: 기본 가격 (0 이상)
        description: 상품 설명
        variants: 변형 목록 (최소 1개)
        is_active / is_visible / is_featured / is_sold_out: 노출 상태 플래그
        tags: 정규화된 태그 목록
        specifications: 자유 형식 사양 (JSON 객체)
        collections: 컬렉션 라벨 목록
        discount: 할인율 (0 이상)
        rating: 평점
        view_count: 조회수 (단조 증가)
        video_url: 상품 영상 URL
    """

    __tablename__ = "products"

    id = uuid_pk()
    name = Column(String(200), nullable=False)
    slug = Column(String(220), unique=True, nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=False, index=True)
    brand_id = Column(Uuid, ForeignKey("brands.id"), nullable=False, index=True)
    base_price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_sold_out = Column(Boolean, nullable=False, default=False)
    specifications = Column(JSON, nullable=False, default=dict)
    discount = Column(Numeric(5, 2, asdecimal=False), nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    video_url = Column(String(500), nullable=True)

    category = relationship("Category")
    brand = relationship("Brand")
    variants = relationship(
        "ProductVariant",
        back_populates="product",
        order_by="ProductVariant.position",
        cascade="all, delete-orphan",
    )
    tag_rows = relationship(
        "ProductTag", order_by="ProductTag.id", cascade="all, delete-orphan"
    )
    collection_rows = relationship(
        "ProductCollection", order_by="ProductCollection.id", cascade="all, delete-orphan"
    )

    tags = association_proxy(
        "tag_rows", "value", creator=lambda value: ProductTag(value=value)
    )
    collections = association_proxy(
        "collection_rows", "value", creator=lambda value: ProductCollection(value=value)
    )

    @property
    def color_ids(self) -> set:
        """변형들이 참조하는 고유 색상 ID 집합"""
        return {variant.color_id for variant in self.variants if variant.color_id}

    def to_document(self, populate: bool = True) -> dict:
        """
        상품을 응답용 문서(dict)로 변환합니다.

        populate=True이면 카테고리/브랜드/색상 참조를 표시용 필드로 확장합니다.
        반환 문서는 UUID와 datetime을 그대로 담고 있으므로 project()로 정규화해야 합니다.
        """
        category = self.category.summary() if populate and self.category else self.category_id
        brand = self.brand.summary() if populate and self.brand else self.brand_id

        return {
            "_id": self.id,
            "name": self.name,
            "slug": self.slug,
            "category": category,
            "brand": brand,
            "base_price": self.base_price,
            "description": self.description,
            "variants": [variant.to_document(populate) for variant in self.variants],
            "isActive": self.is_active,
            "isVisible": self.is_visible,
            "isFeatured": self.is_featured,
            "isSoldOut": self.is_sold_out,
            "tags": list(self.tags),
            "specifications": dict(self.specifications or {}),
            "collections": list(self.collections),
            "discount": self.discount,
            "rating": self.rating,
            "viewCount": self.view_count,
            "videoUrl": self.video_url,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, slug='{self.slug}', base_price={self.base_price})>"

    def __str__(self) -> str:
        return f"Product: {self.name}"
