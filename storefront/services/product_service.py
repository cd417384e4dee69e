"""
상품 관리 서비스

상품 생성/수정/삭제와 관리자용 조회를 담당합니다.

변경 작업은 모두 같은 순서를 따릅니다.
1. 요청 본문 파싱 및 참조 검증 (저장소를 변경하지 않음, 실패 시 4xx)
2. slug 락 점유 후 중복 검사
3. UnitOfWork 안에서 상품 저장 + 카테고리/브랜드/색상 카운터 조정
   (실패 시 전체 롤백, 이미 올린 이미지는 보상 작업으로 삭제)
4. 교체/삭제된 이미지 정리 (best-effort, 실패는 경고 로그)
"""

import re
import uuid
from collections import defaultdict
from contextlib import nullcontext
from typing import Any, Iterable, Mapping

import structlog
from redis import Redis
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.core.config import Settings
from storefront.core.exceptions import (
    InvalidFilterException,
    InvalidReferenceException,
    ProductAlreadyExistsException,
    ProductNotFoundException,
    ProductValidationException,
)
from storefront.core.identifiers import parse_id
from storefront.core.slug import normalize
from storefront.db.unit_of_work import UnitOfWork
from storefront.models import Brand, Category, Color, Product, ProductVariant, VariantSize
from storefront.schemas.common import Pagination
from storefront.schemas.product import (
    ProductCreatePayload,
    ProductUpdatePayload,
    VariantPayload,
)
from storefront.services.asset_store import AssetStore, UploadedImage
from storefront.services.counter_service import CounterService, reconcile
from storefront.services.lock_service import LockService
from storefront.services.product_query import ProductQueryBuilder

logger = structlog.get_logger()

# 업로드 필드 이름: variants[<슬롯 인덱스>][image]
IMAGE_FIELD = re.compile(r"^variants\[(\d+)\]\[image\]$")


def group_uploads(images: Iterable[UploadedImage]) -> dict[int, list[UploadedImage]]:
    """
    업로드 파일을 변형 슬롯 인덱스별로 묶습니다. 형식이 맞지 않는 필드는 무시합니다.

    Example:
        >>> groups = group_uploads([UploadedImage("variants[1][image]", "a.jpg", b"")])
        >>> list(groups)
        [1]
    """
    groups = defaultdict(list)
    for image in images:
        match = IMAGE_FIELD.match(image.field or "")
        if match:
            groups[int(match.group(1))].append(image)
    return dict(groups)


def _slot_alt(data: Mapping[str, Any], index: int, position: int) -> str:
    alt = data.get(f"variants[{index}][imageAlt_{position}]")
    if isinstance(alt, str) and alt.strip():
        return alt.strip()
    return f"Variant {index} Image {position + 1}"


def _public_ids(variants: Iterable[ProductVariant]) -> list[str]:
    return [
        image["public_id"]
        for variant in variants
        for image in (variant.images or [])
        if image.get("public_id")
    ]


class ProductService:
    """상품 생성, 수정, 삭제 및 관리자 조회 서비스."""

    @staticmethod
    def create_product(
        data: Mapping[str, Any],
        images: list[UploadedImage],
        db: Session,
        redis: Redis,
        settings: Settings,
        asset_store: AssetStore,
    ) -> Product:
        """
        상품을 생성합니다.

        카테고리/브랜드/색상 참조를 모두 검증한 뒤, slug 락을 점유한 상태에서
        하나의 원자적 작업 단위로 상품을 저장하고 카운터를 증가시킵니다.

        Args:
            data: 요청 본문 (폼 필드 또는 JSON)
            images: 업로드된 변형 이미지 목록
            db: DB 세션
            redis: Redis 클라이언트 (slug 락)
            settings: 애플리케이션 설정
            asset_store: 이미지 저장소

        Returns:
            생성된 Product 객체

        Raises:
            ProductValidationException: 필수 필드 누락, 변형 없음 (422)
            InvalidReferenceException: 잘못된 참조, 애매한 업로드 (400)
            ProductAlreadyExistsException: slug 중복 (409)
            LockAcquisitionException: 같은 slug에 대한 동시 요청 (409)
            CatalogOperationException: 원자적 작업 실패 (500)
        """
        payload = ProductCreatePayload.from_request(data)

        category = ProductService._require(db, Category, payload.category, "category")
        brand = ProductService._require(db, Brand, payload.brand, "brand")
        ProductService._verify_colors(db, [variant.color for variant in payload.variants])

        slug = normalize(payload.name)
        if not slug:
            raise ProductValidationException("Product name must contain letters or digits")

        uploads = group_uploads(images)
        assigned = {index: files for index, files in uploads.items() if index < len(payload.variants)}
        if images and not assigned:
            raise InvalidReferenceException("Uploaded images must be assigned to a variant")

        with LockService.hold(f"product:slug:{slug}", redis, settings):
            ProductService._ensure_slug_free(db, slug)

            with UnitOfWork(
                db, "Product creation", conflicts={"slug": ProductAlreadyExistsException(slug)}
            ) as uow:
                variants = []
                for index, variant_payload in enumerate(payload.variants):
                    variant = ProductService._new_variant(variant_payload, index)
                    variant.images = ProductService._store_images(
                        assigned.get(index, []), index, data, asset_store, uow
                    )
                    variants.append(variant)

                product = Product(
                    name=payload.name,
                    slug=slug,
                    category_id=category.id,
                    brand_id=brand.id,
                    base_price=payload.base_price,
                    description=payload.description,
                    variants=variants,
                    is_active=payload.is_active,
                    is_visible=payload.is_visible,
                    is_featured=payload.is_featured,
                    is_sold_out=payload.is_sold_out,
                    specifications=payload.specifications or {},
                    discount=payload.discount,
                    video_url=payload.video_url,
                )
                product.tags = payload.tags or []
                product.collections = payload.collections or []
                db.add(product)

                CounterService.adjust(db, Category, [category.id], 1)
                CounterService.adjust(db, Brand, [brand.id], 1)
                CounterService.apply(db, Color, reconcile((), product.color_ids))

        logger.info(
            "Product created",
            product_id=str(product.id),
            slug=slug,
            variants=len(variants),
            images=sum(len(variant.images) for variant in variants),
        )
        return product

    @staticmethod
    def update_product(
        product_id: Any,
        data: Mapping[str, Any],
        images: list[UploadedImage],
        db: Session,
        redis: Redis,
        settings: Settings,
        asset_store: AssetStore,
    ) -> Product:
        """
        상품을 수정합니다.

        들어온 변형은 _id로 기존 변형과 병합되고, color만 있는 항목은 새 변형으로
        뒤에 추가됩니다. 업로드 이미지는 최종 변형 목록의 같은 위치 슬롯에 배정되며,
        해당 슬롯의 기존 이미지는 커밋 후 저장소에서 삭제됩니다.

        Raises:
            InvalidReferenceException: 잘못된 상품/참조/변형 ID, 애매한 업로드 (400)
            ProductNotFoundException: 상품이 없는 경우 (404)
            ProductAlreadyExistsException: 다른 상품과 slug 중복 (409)
            CatalogOperationException: 원자적 작업 실패 (500)
        """
        product = ProductService._load(db, product_id)
        payload = ProductUpdatePayload.from_request(data)

        if payload.category is not None and payload.category != product.category_id:
            ProductService._require(db, Category, payload.category, "category")
        if payload.brand is not None and payload.brand != product.brand_id:
            ProductService._require(db, Brand, payload.brand, "brand")

        incoming = payload.variants or []
        ProductService._verify_colors(db, [v.color for v in incoming if v.color is not None])

        existing = {variant.id: variant for variant in product.variants}
        patches, additions = [], []
        for variant_payload in incoming:
            if variant_payload.id in existing:
                patches.append((existing[variant_payload.id], variant_payload))
            elif variant_payload.color is not None:
                additions.append(variant_payload)
            else:
                raise InvalidReferenceException(
                    f"Variant {variant_payload.id} does not belong to this product"
                )

        slot_count = len(product.variants) + len(additions)
        uploads = group_uploads(images)
        assigned = {index: files for index, files in uploads.items() if index < slot_count}
        if images:
            kept_images = any(
                variant.images
                for index, variant in enumerate(product.variants)
                if index not in assigned
            )
            if not assigned and not kept_images:
                raise InvalidReferenceException(
                    "At least one variant must have an image when images are uploaded"
                )

        slug = None
        if payload.name is not None and payload.name != product.name:
            slug = normalize(payload.name)
            if not slug:
                raise ProductValidationException("Product name must contain letters or digits")
            if slug == product.slug:
                slug = None

        old_color_ids = product.color_ids
        old_category_id = product.category_id
        old_brand_id = product.brand_id
        replaced = []

        lock = LockService.hold(f"product:slug:{slug}", redis, settings) if slug else nullcontext()
        with lock:
            if slug:
                ProductService._ensure_slug_free(db, slug, exclude_id=product.id)

            conflicts = {"slug": ProductAlreadyExistsException(slug)} if slug else None
            with UnitOfWork(db, "Product update", conflicts=conflicts) as uow:
                for variant, variant_payload in patches:
                    ProductService._patch_variant(variant, variant_payload)

                next_position = max((v.position for v in product.variants), default=-1) + 1
                for offset, variant_payload in enumerate(additions):
                    product.variants.append(
                        ProductService._new_variant(variant_payload, next_position + offset)
                    )

                slots = list(product.variants)
                for index, files in sorted(assigned.items()):
                    variant = slots[index]
                    replaced.extend(_public_ids([variant]))
                    variant.images = ProductService._store_images(
                        files, index, data, asset_store, uow
                    )

                ProductService._apply_fields(product, payload, slug)

                CounterService.apply(db, Color, reconcile(old_color_ids, product.color_ids))
                CounterService.apply(
                    db, Category, reconcile([old_category_id], [product.category_id])
                )
                CounterService.apply(db, Brand, reconcile([old_brand_id], [product.brand_id]))

        ProductService._discard_assets(replaced, asset_store, product.id)
        logger.info(
            "Product updated",
            product_id=str(product.id),
            patched=len(patches),
            added=len(additions),
            replaced_images=len(replaced),
        )
        return product

    @staticmethod
    def delete_product(product_id: Any, db: Session, asset_store: AssetStore) -> None:
        """
        상품을 삭제합니다.

        카운터 감소와 상품 삭제는 하나의 원자적 작업 단위이며,
        변형 이미지 삭제는 커밋 후 best-effort로 진행합니다.

        Raises:
            InvalidReferenceException: 잘못된 상품 ID (400)
            ProductNotFoundException: 상품이 없는 경우 (404)
            CatalogOperationException: 원자적 작업 실패 (500)
        """
        product = ProductService._load(db, product_id)
        public_ids = _public_ids(product.variants)
        deleted_id = product.id

        with UnitOfWork(db, "Product deletion"):
            CounterService.adjust(db, Category, [product.category_id], -1)
            CounterService.adjust(db, Brand, [product.brand_id], -1)
            CounterService.apply(db, Color, reconcile(product.color_ids, ()))
            db.delete(product)

        ProductService._discard_assets(public_ids, asset_store, deleted_id)
        logger.info("Product deleted", product_id=str(deleted_id), images=len(public_ids))

    @staticmethod
    def list_products(
        params: Mapping[str, Any], db: Session, settings: Settings
    ) -> tuple[list[Product], Pagination, str]:
        """
        관리자용 상품 목록 (노출 여부와 무관하게 전체 상품 대상).

        태그 필터는 지정한 태그를 모두 가진 상품만 반환합니다.
        """
        query = ProductQueryBuilder(db, settings.default_page_size).build(
            params, match_all_tags=True
        )
        total = query.count(db)
        products = query.fetch(db)
        return (
            products,
            Pagination.build(query.window.page, query.window.limit, total),
            query.summary,
        )

    @staticmethod
    def search_products(
        params: Mapping[str, Any], db: Session, settings: Settings
    ) -> tuple[list[Product], Pagination, str]:
        """
        관리자용 상품 검색

        Raises:
            InvalidFilterException: 검색어가 없는 경우 (400)
        """
        search = params.get("search")
        if not search or not str(search).strip():
            raise InvalidFilterException("Search term is required")
        return ProductService.list_products(params, db, settings)

    @staticmethod
    def get_product(product_id: Any, db: Session) -> Product:
        """상품을 조회하고 조회수를 1 증가시킵니다."""
        product = ProductService._load(db, product_id)
        ProductService.record_view(db, product)
        return product

    @staticmethod
    def record_view(db: Session, product: Product) -> None:
        db.execute(
            update(Product)
            .where(Product.id == product.id)
            .values(view_count=Product.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(product)

    @staticmethod
    def _load(db: Session, product_id: Any) -> Product:
        parsed = parse_id(product_id)
        if parsed is None:
            raise InvalidReferenceException("Invalid product ID")

        product = db.get(Product, parsed)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    def _require(db: Session, model, reference_id: uuid.UUID, kind: str):
        entity = db.get(model, reference_id)
        if entity is None:
            raise InvalidReferenceException(f"Invalid {kind} ID")
        return entity

    @staticmethod
    def _verify_colors(db: Session, color_ids: list) -> None:
        """요청된 색상 ID 집합이 모두 존재하는지 확인합니다."""
        requested = set(color_ids)
        if not requested:
            return

        found = set(
            db.execute(select(Color.id).where(Color.id.in_(requested))).scalars().all()
        )
        missing = requested - found
        if missing:
            raise InvalidReferenceException(
                f"Invalid color ID(s): {', '.join(sorted(str(color) for color in missing))}"
            )

    @staticmethod
    def _ensure_slug_free(db: Session, slug: str, exclude_id: uuid.UUID | None = None) -> None:
        statement = select(Product.id).where(Product.slug == slug)
        if exclude_id is not None:
            statement = statement.where(Product.id != exclude_id)
        if db.execute(statement).first() is not None:
            raise ProductAlreadyExistsException(slug)

    @staticmethod
    def _new_variant(payload: VariantPayload, position: int) -> ProductVariant:
        return ProductVariant(
            id=uuid.uuid4(),
            position=position,
            color_id=payload.color,
            price=payload.price,
            sizes=[
                VariantSize(size=size.size, quantity=size.quantity)
                for size in payload.sizes or []
            ],
            images=[],
        )

    @staticmethod
    def _patch_variant(variant: ProductVariant, payload: VariantPayload) -> None:
        # 이미지는 새 업로드가 같은 슬롯을 대상으로 할 때만 교체
        if payload.color is not None:
            variant.color_id = payload.color
        if payload.price is not None:
            variant.price = payload.price
        if payload.sizes is not None:
            variant.sizes = [
                VariantSize(size=size.size, quantity=size.quantity) for size in payload.sizes
            ]

    @staticmethod
    def _store_images(
        files: list[UploadedImage],
        index: int,
        data: Mapping[str, Any],
        asset_store: AssetStore,
        uow: UnitOfWork,
    ) -> list[dict]:
        """슬롯의 파일을 올리고 이미지 메타데이터 목록을 반환합니다. 첫 이미지가 대표 이미지입니다."""
        stored = []
        for position, image in enumerate(files):
            asset = asset_store.upload(image)
            uow.add_compensation(
                lambda public_id=asset.public_id: asset_store.delete(public_id),
                f"delete uploaded asset {asset.public_id}",
            )
            stored.append(
                {
                    "url": asset.url,
                    "public_id": asset.public_id,
                    "alt": _slot_alt(data, index, position),
                    "isPrimary": position == 0,
                }
            )
        return stored

    @staticmethod
    def _apply_fields(
        product: Product, payload: ProductUpdatePayload, slug: str | None
    ) -> None:
        """None이 아닌 필드만 상품에 반영합니다."""
        if payload.name is not None:
            product.name = payload.name
        if slug:
            product.slug = slug

        simple_fields = {
            "category_id": payload.category,
            "brand_id": payload.brand,
            "base_price": payload.base_price,
            "description": payload.description,
            "is_active": payload.is_active,
            "is_visible": payload.is_visible,
            "is_featured": payload.is_featured,
            "is_sold_out": payload.is_sold_out,
            "specifications": payload.specifications,
            "discount": payload.discount,
            "video_url": payload.video_url,
        }
        for attribute, value in simple_fields.items():
            if value is not None:
                setattr(product, attribute, value)

        if payload.tags is not None:
            product.tags = payload.tags
        if payload.collections is not None:
            product.collections = payload.collections

    @staticmethod
    def _discard_assets(public_ids: list[str], asset_store: AssetStore, product_id) -> None:
        """저장소에서 이미지를 삭제합니다. 실패는 경고로 기록하고 계속 진행합니다."""
        for public_id in public_ids:
            try:
                asset_store.delete(public_id)
            except Exception as error:
                logger.warning(
                    "Asset deletion failed",
                    product_id=str(product_id),
                    public_id=public_id,
                    error=str(error),
                )
