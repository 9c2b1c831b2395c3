from collections.abc import Mapping
from typing import Any

from jwt_warden.core.flags.interface import FlagStore
from jwt_warden.core.utils.security import generate_cookie_secret
from jwt_warden.main.config import CookieConfig, JWTConfig
from jwt_warden.token.claims import build_claims
from jwt_warden.token.codec import decode_claims
from jwt_warden.token.jwt_payload_schema import ClaimSet
from jwt_warden.token.token import Token
from loggers import get_logger

logger = get_logger(__name__)


class TokenKeeper:
    """
    Issues, finds and revokes tokens for one configuration and flag store.

    The configuration objects are immutable; ``reconfigure`` swaps them as a whole
    and every token bound to this keeper picks up the new values.
    """

    def __init__(
        self,
        config: JWTConfig,
        store: FlagStore,
        cookie_config: CookieConfig | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.cookie_config = cookie_config or CookieConfig()

    def reconfigure(
        self, config: JWTConfig, cookie_config: CookieConfig | None = None
    ) -> None:
        self.config = config
        if cookie_config is not None:
            self.cookie_config = cookie_config

    def build(
        self,
        claims: Mapping[str, Any] | None = None,
        *,
        secret: str | None = None,
        cookie_secret: str | None = None,
    ) -> Token:
        """Wrap freshly assembled claims in a token without touching the flag store."""
        return Token(
            self,
            build_claims(self.config, claims),
            secret=secret or self.config.JWT_SECRET_KEY,
            cookie_secret=cookie_secret,
        )

    def create(self, claims: Mapping[str, Any] | None = None) -> Token:
        """
        Issue a new token, with a fresh cookie secret when cookie lock is on.
        """
        cookie_secret = generate_cookie_secret() if self.config.COOKIE_LOCK else None
        token = self.build(claims, cookie_secret=cookie_secret)
        logger.debug("Token %s created", token.id)
        return token

    def decode(
        self,
        raw_token: str | bytes | None,
        *,
        secret: str | None = None,
        cookie_secret: str | None = None,
        issuer: str | None = None,
    ) -> ClaimSet | None:
        return decode_claims(
            raw_token,
            secret=secret or self.config.JWT_SECRET_KEY,
            cookie_secret=cookie_secret,
            algorithm=self.config.ALGORITHM,
            issuer=issuer or self.config.JWT_ISSUER,
            audience=self.config.JWT_AUDIENCE,
        )

    async def find(
        self,
        raw_token: str | bytes | None,
        *,
        secret: str | None = None,
        cookie_secret: str | None = None,
        issuer: str | None = None,
    ) -> Token | None:
        """
        Look up a received token.

        The token is verified first and the flag store is only asked about tokens
        that pass. Unverifiable and revoked tokens both come back as ``None``.
        """
        claims = self.decode(
            raw_token, secret=secret, cookie_secret=cookie_secret, issuer=issuer
        )
        if claims is None:
            return None

        token = Token(
            self,
            claims,
            secret=secret or self.config.JWT_SECRET_KEY,
            cookie_secret=cookie_secret,
        )
        if await token.is_revoked():
            logger.info("Revoked token %s presented", token.id)
            return None
        return token

    async def mark_pending_rotation(self, jti: str) -> None:
        """
        Ask holders of ``jti`` to rotate it on next use. The marker lives for the
        configured expiry, an upper bound on any token's remaining life.
        """
        await self.store.rotate(jti, self.config.TOKEN_EXPIRE_SECONDS)

    async def revoke(self, jti: str) -> None:
        """Revoke a token by id alone, for the full configured expiry."""
        await self.store.revoke(jti, self.config.TOKEN_EXPIRE_SECONDS)
        logger.info("Token %s revoked by id", jti)

    async def is_revoked(self, jti: str) -> bool:
        return await self.store.is_revoked(jti)

    async def is_pending(self, jti: str) -> bool:
        return await self.store.is_pending(jti)
