from abc import ABC, abstractmethod


class FlagStore(ABC):
    """
    TTL-aware store of per-token revocation and pending-rotation markers.

    Keys are token ids (``jti``). Implementations need atomic per-key writes but
    no multi-key transactions. Store faults are not caught by callers.
    """

    @abstractmethod
    async def revoke(self, jti: str, ttl: int) -> None:
        """Mark a token id revoked for ``ttl`` seconds."""
        raise NotImplementedError

    @abstractmethod
    async def revoke_exclusive(self, jti: str, ttl: int) -> bool:
        """Revoke a token id unless it is already revoked; report whether this call did it."""
        raise NotImplementedError

    @abstractmethod
    async def rotate(self, jti: str, ttl: int) -> None:
        """Mark a token id as pending rotation for ``ttl`` seconds."""
        raise NotImplementedError

    @abstractmethod
    async def is_revoked(self, jti: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def is_pending(self, jti: str) -> bool:
        raise NotImplementedError
