from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import FastAPI

from jwt_warden.core.flags.redis_store import RedisFlagStore
from jwt_warden.core.redis.lifecycle import close_redis, connect_redis
from jwt_warden.main.config import Config
from jwt_warden.token.keeper import TokenKeeper
from loggers import get_logger

logger = get_logger(__name__)


async def on_warden_startup(app: FastAPI, settings: Config) -> None:
    """
    Connect the flag store and attach a token keeper to app.state for DI access.
    """
    redis_client = await connect_redis(settings.redis.dsn)
    store = RedisFlagStore(redis_client, key_prefix=settings.redis.REDIS_KEY_PREFIX)
    app.state.redis_client = redis_client
    app.state.token_keeper = TokenKeeper(
        settings.jwt, store, cookie_config=settings.cookie
    )
    logger.info(
        "Token keeper ready (issuer=%r, cookie_lock=%s)",
        settings.jwt.JWT_ISSUER,
        settings.jwt.COOKIE_LOCK,
    )


async def on_warden_shutdown(app: FastAPI) -> None:
    await close_redis(getattr(app.state, "redis_client", None))
    app.state.redis_client = None
    app.state.token_keeper = None


def warden_lifespan(
    settings: Config,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """
    Lifespan factory for applications that authenticate with this package.

    Example:
        app = FastAPI(lifespan=warden_lifespan(get_settings()))
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        await on_warden_startup(app, settings)
        try:
            yield
        finally:
            await on_warden_shutdown(app)

    return lifespan
