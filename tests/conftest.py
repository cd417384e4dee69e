"""
pytest 픽스처 정의
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.config import Settings, get_settings
from storefront.core.slug import normalize
from storefront.db.database import Base, get_db
from storefront.db.redis_client import get_redis_client
from storefront.main import app
from storefront.models import Brand, Category, Color, Product, ProductVariant, VariantSize
from storefront.services.asset_store import LocalAssetStore, get_asset_store


@pytest.fixture(scope="session")
def settings():
    """테스트용 설정 객체 픽스처"""
    return Settings(
        redis_host="localhost",
        redis_port=6379,
        redis_db=1,
        redis_password="",
        database_url="sqlite:///:memory:",
        lock_timeout_seconds=10,
        default_page_size=12,
        app_env="test",
    )


@pytest.fixture(scope="function")
def redis_client():
    """
    slug 락용 Redis 클라이언트 목(mock) 픽스처

    SET NX는 항상 성공하고, 해제 스크립트(eval)는 1을 반환합니다.
    """
    client = MagicMock()
    client.set.return_value = True
    client.eval.return_value = 1
    return client


@pytest.fixture(scope="function")
def asset_store(tmp_path):
    """임시 디렉터리에 저장하는 이미지 저장소 픽스처"""
    return LocalAssetStore(tmp_path / "uploads", "/uploads")


@pytest.fixture(scope="function")
def test_db() -> Session:
    """
    테스트용 in-memory SQLite 데이터베이스 세션 픽스처

    각 테스트 함수마다 새로운 데이터베이스를 생성합니다.
    TestClient의 작업 스레드에서도 같은 DB를 보도록 StaticPool을 사용합니다.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def category(test_db: Session) -> Category:
    category = Category(name="Shirts", description="Casual shirts")
    test_db.add(category)
    test_db.commit()
    return category


@pytest.fixture
def other_category(test_db: Session) -> Category:
    category = Category(name="Jackets")
    test_db.add(category)
    test_db.commit()
    return category


@pytest.fixture
def brand(test_db: Session) -> Brand:
    brand = Brand(name="Northwind")
    test_db.add(brand)
    test_db.commit()
    return brand


@pytest.fixture
def colors(test_db: Session) -> dict[str, Color]:
    """X, Y, Z 세 가지 색상"""
    palette = {
        "x": Color(name="Black", hex="#000000"),
        "y": Color(name="White", hex="#FFFFFF"),
        "z": Color(name="Navy", hex="#000080"),
    }
    test_db.add_all(palette.values())
    test_db.commit()
    return palette


@pytest.fixture
def product_data(category, brand, colors):
    """상품 생성 요청 본문 팩토리 (폼 필드 형태)"""

    def build(**overrides):
        data = {
            "name": "Linen Shirt",
            "category": str(category.id),
            "brand": str(brand.id),
            "base_price": "49.90",
            "description": "Breathable summer shirt",
            "variants": json.dumps(
                [
                    {
                        "color": str(colors["x"].id),
                        "price": 49.9,
                        "sizes": [{"size": "M", "quantity": 5}],
                    },
                    {
                        "color": str(colors["y"].id),
                        "price": 54.9,
                        "sizes": [{"size": "L", "quantity": 0}],
                    },
                ]
            ),
            "tags": "Summer, Linen",
            "collections": "Summer Sale",
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture(scope="function")
def test_client(test_db, redis_client, settings, asset_store):
    """각 테스트마다 테스트 데이터베이스, Redis 목, 설정, 이미지 저장소를 주입하는 픽스처"""

    def override_get_db():
        try:
            yield test_db
        except Exception:
            test_db.rollback()
            raise

    def override_get_redis_client():
        yield redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = override_get_redis_client
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_asset_store] = lambda: asset_store

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_product(test_db, category, brand, colors):
    """
    조회 테스트용 상품을 직접 저장하는 팩토리 (카운터는 조정하지 않음)

    variants 항목: {"color": Color, "price": float, "sizes": {"M": 5}, "images": [...]}
    """

    def build(
        name,
        base_price=10.0,
        variants=None,
        tags=(),
        collections=(),
        category=category,
        brand=brand,
        **fields,
    ):
        product = Product(
            name=name,
            slug=normalize(name),
            category_id=category.id,
            brand_id=brand.id,
            base_price=base_price,
            **fields,
        )
        entries = variants or [{"color": colors["x"], "price": base_price, "sizes": {"M": 5}}]
        for position, entry in enumerate(entries):
            product.variants.append(
                ProductVariant(
                    position=position,
                    color_id=entry["color"].id,
                    price=entry.get("price", base_price),
                    sizes=[
                        VariantSize(size=size, quantity=quantity)
                        for size, quantity in entry.get("sizes", {"M": 5}).items()
                    ],
                    images=entry.get("images", []),
                )
            )
        product.tags = list(tags)
        product.collections = list(collections)
        test_db.add(product)
        test_db.commit()
        return product

    return build
