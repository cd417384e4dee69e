"""
SQLAlchemy 데이터베이스 설정

SQLAlchemy 엔진, 세션, Base 클래스를 정의합니다.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from storefront.core.config import get_settings

settings = get_settings()


def create_db_engine(database_url: str) -> Engine:
    """
    데이터베이스 URL에 맞는 엔진을 생성합니다.

    SQLite는 check_same_thread를 비활성화하고,
    그 외 데이터베이스는 connection pool을 설정합니다.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=40,
        pool_timeout=30,
        pool_pre_ping=True,  # connection 유효성 자동 체크
        pool_recycle=3600,  # 1시간마다 connection 재생성 (stale connection 방지)
    )


engine = create_db_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI 의존성 주입용 데이터베이스 세션 제너레이터

    사용 예:
        @router.get("/brands")
        def list_brands(db: Session = Depends(get_db)):
            return db.query(Brand).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
