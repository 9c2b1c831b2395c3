from collections.abc import AsyncGenerator

from fastapi import FastAPI
import httpx
import pytest
import pytest_asyncio

from jwt_warden.core.errors.handlers import include_exceptions_handlers
from jwt_warden.core.flags.redis_store import RedisFlagStore
from jwt_warden.main.config import Config, CookieConfig, JWTConfig
from jwt_warden.token.keeper import TokenKeeper
from tests.factories.token_factory import make_jwt_config
from tests.fakes.redis import InMemoryRedis


@pytest.fixture
def jwt_config() -> JWTConfig:
    return make_jwt_config()


@pytest.fixture
def cookie_config() -> CookieConfig:
    return CookieConfig(COOKIE_NAME="session_lock", COOKIE_DOMAIN="example.com")


@pytest.fixture
def settings(jwt_config: JWTConfig, cookie_config: CookieConfig) -> Config:
    return Config(jwt=jwt_config, cookie=cookie_config)


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def flag_store(fake_redis: InMemoryRedis) -> RedisFlagStore:
    return RedisFlagStore(fake_redis, key_prefix="test")  # type: ignore[arg-type]


@pytest.fixture
def keeper(
    jwt_config: JWTConfig, flag_store: RedisFlagStore, cookie_config: CookieConfig
) -> TokenKeeper:
    return TokenKeeper(jwt_config, flag_store, cookie_config=cookie_config)


@pytest.fixture
def locked_keeper(
    flag_store: RedisFlagStore, cookie_config: CookieConfig
) -> TokenKeeper:
    return TokenKeeper(
        make_jwt_config(COOKIE_LOCK=True), flag_store, cookie_config=cookie_config
    )


@pytest.fixture
def app() -> FastAPI:
    application = FastAPI()
    include_exceptions_handlers(application)
    return application


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as client:
        yield client
