"""
설정(Config) 관련 테스트
"""

from storefront.core.config import Settings


def test_config_from_env(monkeypatch):
    """환경 변수로부터 설정을 로드하는지 테스트"""
    monkeypatch.setenv("REDIS_HOST", "test-redis")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./test.db")
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "20")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.redis_host == "test-redis"
    assert settings.redis_port == 6380
    assert settings.database_url == "sqlite:///./test.db"
    assert settings.default_page_size == 20
    assert settings.log_level == "debug"


def test_config_defaults(monkeypatch):
    """기본값 테스트"""
    for name in ("REDIS_HOST", "REDIS_PORT", "DEFAULT_PAGE_SIZE", "LOCK_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.redis_host == "localhost"
    assert settings.redis_port == 6379
    assert settings.lock_timeout_seconds == 10
    assert settings.default_page_size == 12


def test_redis_url_with_password():
    """비밀번호가 있는 Redis URL 생성"""
    settings = Settings(redis_host="cache", redis_port=6379, redis_db=2, redis_password="secret")

    assert settings.redis_url == "redis://:secret@cache:6379/2"


def test_redis_url_without_password():
    settings = Settings(redis_host="cache", redis_port=6379, redis_db=0, redis_password="")

    assert settings.redis_url == "redis://cache:6379/0"


def test_is_development():
    assert Settings(app_env="development").is_development
    assert not Settings(app_env="production").is_development
