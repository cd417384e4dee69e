"""
structlog 기반 로깅 설정

애플리케이션 시작 시 configure_logging()을 한 번 호출합니다.
각 모듈은 structlog.get_logger()로 로거를 얻어 key-value 형태로 기록합니다.
"""

import logging
import sys

import structlog

from storefront.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """
    structlog 프로세서 체인과 로그 레벨을 설정합니다.

    개발 환경에서는 콘솔 렌더러, 그 외에는 JSON 렌더러를 사용합니다.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.is_development
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
