from __future__ import annotations

import time
from typing import Any

from jwt_warden.core.flags.redis_scripts import REVOKE_EXCLUSIVE_SCRIPT


def _normalize_key(key: str | bytes) -> str:
    if isinstance(key, bytes):
        return key.decode("utf-8")
    return key


def _normalize_value(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _now() -> float:
    return time.monotonic()


class InMemoryRedis:
    """
    Just enough of ``redis.asyncio.Redis`` for the flag store, with a movable clock.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._expires: dict[str, float] = {}
        self._clock_offset = 0.0
        self.writes: list[tuple[str, str, int | None]] = []
        self.closed = False

    def _time(self) -> float:
        return _now() + self._clock_offset

    def advance(self, seconds: float) -> None:
        """Move the fake clock forward so keys can expire without sleeping."""
        self._clock_offset += seconds

    def _purge_expired(self, key: str) -> None:
        expires_at = self._expires.get(key)
        if expires_at is None:
            return
        if self._time() >= expires_at:
            self._store.pop(key, None)
            self._expires.pop(key, None)

    async def get(self, key: str | bytes) -> str | None:
        key_norm = _normalize_key(key)
        self._purge_expired(key_norm)
        return self._store.get(key_norm)

    async def set(
        self,
        key: str | bytes,
        value: Any,
        *,
        ex: int | None = None,
        px: int | None = None,
        nx: bool = False,
    ) -> bool | None:
        key_norm = _normalize_key(key)
        self._purge_expired(key_norm)
        if nx and key_norm in self._store:
            return None
        if ex is not None and int(ex) <= 0:
            raise ValueError("invalid expire time in 'set' command")
        self._store[key_norm] = _normalize_value(value)
        if ex is not None:
            self._expires[key_norm] = self._time() + int(ex)
        elif px is not None:
            self._expires[key_norm] = self._time() + (int(px) / 1000)
        else:
            self._expires.pop(key_norm, None)
        self.writes.append((key_norm, self._store[key_norm], ex))
        return True

    async def ttl(self, key: str | bytes) -> int:
        key_norm = _normalize_key(key)
        self._purge_expired(key_norm)
        if key_norm not in self._store:
            return -2
        expires_at = self._expires.get(key_norm)
        if expires_at is None:
            return -1
        return max(0, round(expires_at - self._time()))

    async def eval(
        self,
        script: str,
        numkeys: int,
        *keys_and_args: Any,
    ) -> int:
        if script.strip() == REVOKE_EXCLUSIVE_SCRIPT.strip():
            return await self._eval_revoke_exclusive(numkeys, *keys_and_args)
        raise NotImplementedError("Script not supported in fake Redis.")

    async def _eval_revoke_exclusive(self, numkeys: int, *keys_and_args: Any) -> int:
        if numkeys != 1:
            raise ValueError("REVOKE_EXCLUSIVE_SCRIPT expects 1 key.")

        flag_key = _normalize_key(keys_and_args[0])
        ttl_seconds = int(keys_and_args[1])
        revoked_flag = _normalize_value(keys_and_args[2])

        if await self.get(flag_key) == revoked_flag:
            return 0
        await self.set(flag_key, revoked_flag, ex=ttl_seconds)
        return 1

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True
