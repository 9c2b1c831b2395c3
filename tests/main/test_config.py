from datetime import datetime, timezone

from pydantic import ValidationError
import pytest

from jwt_warden.main import config as config_module
from jwt_warden.main.config import Config, CookieConfig, JWTConfig, RedisConfig
from tests.factories.token_factory import TEST_SECRET, make_jwt_config


def test_jwt_config_defaults() -> None:
    config = JWTConfig(JWT_SECRET_KEY=TEST_SECRET)

    assert config.ALGORITHM == "HS256"
    assert config.TOKEN_EXPIRE_SECONDS == 86_400
    assert config.JWT_ISSUER is None
    assert config.COOKIE_LOCK is False
    assert config.JWT_BASE_CLAIMS == {}


def test_jwt_config_is_immutable() -> None:
    config = make_jwt_config()

    with pytest.raises(ValidationError):
        config.JWT_ISSUER = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    "overrides",
    [
        {"JWT_SECRET_KEY": ""},
        {"TOKEN_EXPIRE_SECONDS": 0},
        {"ALGORITHM": "RS256"},
        {"ALGORITHM": "none"},
        {"JWT_BASE_CLAIMS": "[1, 2]"},
        {"JWT_BASE_CLAIMS": "{not json"},
    ],
)
def test_jwt_config_rejects_bad_values(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        make_jwt_config(**overrides)


def test_jwt_config_parses_env_strings() -> None:
    config = JWTConfig(
        JWT_SECRET_KEY=TEST_SECRET,
        ALGORITHM="hs512",
        TOKEN_EXPIRE_SECONDS="3600",  # type: ignore[arg-type]
        COOKIE_LOCK="true",  # type: ignore[arg-type]
        JWT_ISSUER="",
        JWT_BASE_CLAIMS='{"tenant": "acme"}',  # type: ignore[arg-type]
    )

    assert config.ALGORITHM == "HS512"
    assert config.TOKEN_EXPIRE_SECONDS == 3600
    assert config.COOKIE_LOCK is True
    assert config.JWT_ISSUER is None
    assert config.JWT_BASE_CLAIMS == {"tenant": "acme"}


def test_base_claims() -> None:
    config = make_jwt_config(
        TOKEN_EXPIRE_SECONDS=60, JWT_VERSION="7", JWT_BASE_CLAIMS={"tenant": "acme"}
    )
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert config.base_claims(now) == {
        "iss": "api.example.com",
        "aud": "example.com",
        "exp": 1_704_067_260,
        "ver": "7",
        "tenant": "acme",
    }


def test_cookie_options() -> None:
    options = CookieConfig(COOKIE_DOMAIN="", COOKIE_SAMESITE="None").options()  # type: ignore[arg-type]

    assert options == {
        "key": "jwt_warden",
        "path": "/",
        "domain": None,
        "secure": True,
        "httponly": True,
        "samesite": "none",
    }


def test_redis_dsn() -> None:
    redis = RedisConfig(REDIS_HOST="cache", REDIS_PORT=6380, REDIS_PASSWORD="pw")

    assert redis.dsn == "redis://:pw@cache:6380/0"


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("JWT_ISSUER", "env.example.com")
    monkeypatch.setenv("COOKIE_LOCK", "1")
    monkeypatch.setenv("COOKIE_NAME", "lock")
    monkeypatch.setenv("REDIS_KEY_PREFIX", "tokens")
    monkeypatch.setattr(config_module, "dotenv_values", lambda filename: {})
    config_module.get_settings.cache_clear()

    try:
        settings = config_module.get_settings()
    finally:
        config_module.get_settings.cache_clear()

    assert isinstance(settings, Config)
    assert settings.jwt.JWT_ISSUER == "env.example.com"
    assert settings.jwt.COOKIE_LOCK is True
    assert settings.cookie.COOKIE_NAME == "lock"
    assert settings.redis.REDIS_KEY_PREFIX == "tokens"


def test_environment_overrides_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_ISSUER", "from-env")
    monkeypatch.setattr(
        config_module,
        "dotenv_values",
        lambda filename: {"JWT_ISSUER": "from-file", "JWT_AUDIENCE": "file-aud"},
    )

    merged = config_module.load_environment()

    assert merged["JWT_ISSUER"] == "from-env"
    assert merged["JWT_AUDIENCE"] == "file-aud"


def test_insecure_lock_cookie_logs_warning(monkeypatch: pytest.MonkeyPatch) -> None:
    warnings: list[str] = []
    monkeypatch.setattr(
        config_module.logger,
        "warning",
        lambda message, *args: warnings.append(message),
    )

    Config(
        jwt=make_jwt_config(COOKIE_LOCK=True),
        cookie=CookieConfig(COOKIE_SECURE=False),
    )

    assert any("Cookie lock" in w for w in warnings)
