from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from storefront.api.routes import admin_products, brands, products
from storefront.core.config import get_settings
from storefront.core.exceptions import CatalogException
from storefront.core.logging import configure_logging
from storefront.db.database import Base, engine

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
    logger.info("Catalog API started", env=settings.app_env)
    yield


app = FastAPI(
    title="Storefront Catalog API",
    description="상품 카탈로그 조회 및 관리 API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(brands.router, prefix="/api/admin/brands", tags=["brands"])
app.include_router(admin_products.router, prefix="/api/admin/products", tags=["admin-products"])
app.include_router(products.router, prefix="/api/customer/products", tags=["products"])

# 업로드 이미지 정적 서빙 (로컬 저장소 사용 시)
app.mount(settings.asset_base_url, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


@app.exception_handler(CatalogException)
async def catalog_exception_handler(request: Request, exc: CatalogException):
    """카탈로그 예외를 응답 봉투로 변환합니다."""
    if exc.status_code >= 500:
        logger.error(
            "Catalog operation failed",
            path=request.url.path,
            method=request.method,
            error=exc.message,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"statusCode": exc.status_code, "message": exc.message},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"statusCode": exc.status_code, "message": str(exc.detail)},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"statusCode": 422, "message": "; ".join(messages)},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """처리되지 않은 예외는 기록하고 일반 메시지로 응답합니다."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(
        status_code=500,
        content={"statusCode": 500, "message": "An internal error occurred"},
    )


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "Storefront Catalog API",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """헬스체크 엔드포인트 (Docker 헬스체크용)"""
    return {"status": "healthy"}
