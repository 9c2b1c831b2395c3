from collections.abc import Awaitable
from typing import Any, cast

from redis.asyncio import Redis

from jwt_warden.core.flags.interface import FlagStore
from jwt_warden.core.flags.redis_scripts import REVOKE_EXCLUSIVE_SCRIPT
from loggers import get_logger

logger = get_logger(__name__)

DEFAULT_KEY_PREFIX = "jwt_warden"

REVOKED_FLAG = "revoked"
PENDING_FLAG = "pending"


class RedisFlagStore(FlagStore):
    """
    Flag store keeping one Redis key per token id.

    The key holds either ``revoked`` or ``pending``. Revocation overwrites a pending
    marker, while marking a token pending never touches an existing key, so a
    revocation cannot be downgraded.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, jti: str) -> str:
        return f"{self.key_prefix}:{jti}" if self.key_prefix else jti

    @staticmethod
    def _ttl(ttl: int) -> int:
        # Redis rejects non-positive expiries
        return max(int(ttl), 1)

    @staticmethod
    def _normalize_flag(value: Any) -> str | None:
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def _get_flag(self, jti: str) -> str | None:
        return self._normalize_flag(await self.redis.get(self._key(jti)))

    async def revoke(self, jti: str, ttl: int) -> None:
        await self.redis.set(self._key(jti), REVOKED_FLAG, ex=self._ttl(ttl))
        logger.debug("Revocation flag set for %s (ttl=%ss)", jti, self._ttl(ttl))

    async def revoke_exclusive(self, jti: str, ttl: int) -> bool:
        result = await cast(
            Awaitable[Any],
            self.redis.eval(
                REVOKE_EXCLUSIVE_SCRIPT,
                1,
                self._key(jti),
                str(self._ttl(ttl)),
                REVOKED_FLAG,
            ),
        )
        return int(result) == 1

    async def rotate(self, jti: str, ttl: int) -> None:
        created = await self.redis.set(
            self._key(jti), PENDING_FLAG, ex=self._ttl(ttl), nx=True
        )
        if not created:
            logger.debug("Token %s already flagged, pending marker skipped", jti)

    async def is_revoked(self, jti: str) -> bool:
        return await self._get_flag(jti) == REVOKED_FLAG

    async def is_pending(self, jti: str) -> bool:
        return await self._get_flag(jti) == PENDING_FLAG
