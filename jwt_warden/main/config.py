from datetime import datetime, timedelta
from functools import lru_cache
import json
import logging
import os
from typing import Any, Literal

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class JWTConfig(BaseModel):
    ALGORITHM: str = "HS256"
    JWT_SECRET_KEY: str = Field(min_length=1)

    TOKEN_EXPIRE_SECONDS: int = Field(86_400, gt=0)

    JWT_ISSUER: str | None = None
    JWT_AUDIENCE: str | None = None
    JWT_VERSION: str | None = None
    JWT_BASE_CLAIMS: dict[str, Any] = Field(default_factory=dict)

    COOKIE_LOCK: bool = False

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("ALGORITHM")
    @classmethod
    def check_algorithm(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in HMAC_ALGORITHMS:
            raise ValueError(
                f"Unsupported algorithm {v!r}, expected one of {HMAC_ALGORITHMS}"
            )
        return v

    @field_validator("JWT_ISSUER", "JWT_AUDIENCE", "JWT_VERSION", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("JWT_BASE_CLAIMS", mode="before")
    @classmethod
    def parse_base_claims(cls, v: Any) -> Any:
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError as exc:
                raise ValueError("JWT_BASE_CLAIMS must be a JSON object") from exc
            if not isinstance(parsed, dict):
                raise ValueError("JWT_BASE_CLAIMS must be a JSON object")
            return parsed
        return v

    @property
    def expiry(self) -> timedelta:
        return timedelta(seconds=self.TOKEN_EXPIRE_SECONDS)

    def base_claims(self, now: datetime) -> dict[str, Any]:
        """
        Claims every new token starts from, before caller overrides.

        Args:
            now: Issuance time, used to compute the default expiry

        Returns:
            dict: iss, aud, exp and ver followed by the configured extra claims
        """
        claims: dict[str, Any] = {
            "iss": self.JWT_ISSUER,
            "aud": self.JWT_AUDIENCE,
            "exp": int((now + self.expiry).timestamp()),
            "ver": self.JWT_VERSION,
        }
        claims.update(self.JWT_BASE_CLAIMS)
        return claims


class CookieConfig(BaseModel):
    COOKIE_NAME: str = "jwt_warden"
    COOKIE_PATH: str = "/"
    COOKIE_DOMAIN: str | None = None
    COOKIE_SECURE: bool = True
    COOKIE_HTTPONLY: bool = True
    COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("COOKIE_DOMAIN", mode="before")
    @classmethod
    def empty_domain_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("COOKIE_SAMESITE", mode="before")
    @classmethod
    def lower_samesite(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    def options(self) -> dict[str, Any]:
        """Keyword arguments understood by ``Response.set_cookie``."""
        return {
            "key": self.COOKIE_NAME,
            "path": self.COOKIE_PATH,
            "domain": self.COOKIE_DOMAIN,
            "secure": self.COOKIE_SECURE,
            "httponly": self.COOKIE_HTTPONLY,
            "samesite": self.COOKIE_SAMESITE,
        }


class RedisConfig(BaseModel):
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""
    REDIS_DATABASE: str = "0"
    REDIS_KEY_PREFIX: str = "jwt_warden"

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def dsn(self) -> str:
        return (
            f"redis://:"
            f"{self.REDIS_PASSWORD}@"
            f"{self.REDIS_HOST}:"
            f"{self.REDIS_PORT}/"
            f"{self.REDIS_DATABASE}"
        )


class LoggingConfig(BaseModel):
    LOG_LEVEL: str = "INFO"
    LOG_LEVEL_FILE: str = "WARNING"
    LOG_FILE: str | None = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("LOG_FILE", mode="before")
    @classmethod
    def empty_file_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Config(BaseModel):
    jwt: JWTConfig
    cookie: CookieConfig = CookieConfig()
    redis: RedisConfig = RedisConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="after")
    def warn_insecure_cookie(self) -> "Config":
        if self.jwt.COOKIE_LOCK and not self.cookie.COOKIE_SECURE:
            logger.warning(
                "Cookie lock is enabled but the cookie is not marked secure; "
                "the cookie secret may travel over plain HTTP"
            )
        return self


def load_environment() -> dict[str, Any]:
    """
    Merge the dotenv file with the process environment, the latter winning.
    """
    env_filename = ".env.test" if os.getenv("TESTING") == "true" else ".env"
    env_file_values = dotenv_values(env_filename)
    return {
        k: v
        for k, v in {**env_file_values, **dict(os.environ)}.items()
        if v is not None
    }


@lru_cache
def get_logging_config() -> LoggingConfig:
    return LoggingConfig(**load_environment())


@lru_cache
def get_settings() -> Config:
    """
    Cached settings factory. Build a fresh ``Config`` directly in tests instead
    of relying on the environment.
    """
    merged_env = load_environment()

    return Config(
        jwt=JWTConfig(**merged_env),
        cookie=CookieConfig(**merged_env),
        redis=RedisConfig(**merged_env),
        logging=LoggingConfig(**merged_env),
    )
