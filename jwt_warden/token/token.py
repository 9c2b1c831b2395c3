from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from jwt_warden.core.utils.datetime_utils import now_epoch_seconds
from jwt_warden.token.codec import encode_claims
from jwt_warden.token.cookie import project_cookie
from jwt_warden.token.jwt_payload_schema import LIFECYCLE_CLAIMS, ClaimSet
from loggers import get_logger

if TYPE_CHECKING:
    from jwt_warden.token.keeper import TokenKeeper

logger = get_logger(__name__)


class Token:
    """
    A signed token held by reference.

    Wraps the claim set together with the signing secret and cookie secret. The
    instance is bound to the ``TokenKeeper`` that made it and reads the keeper's
    current configuration on every check. ``rotate`` replaces the claims and
    cookie secret in place, so every holder of the instance sees the successor.

    Instances are not safe for concurrent mutation; serialize ``rotate`` calls on
    the same object.
    """

    def __init__(
        self,
        keeper: TokenKeeper,
        claims: ClaimSet,
        *,
        secret: str | None = None,
        cookie_secret: str | None = None,
    ) -> None:
        self._keeper = keeper
        self.claims = claims
        self.secret = secret
        self.cookie_secret = cookie_secret

    def __repr__(self) -> str:
        return f"<Token jti={self.id!r}>"

    def __str__(self) -> str:
        return self.to_jwt()

    @property
    def id(self) -> str | None:
        return self.claims.get("jti")

    @property
    def keeper(self) -> TokenKeeper:
        return self._keeper

    def remaining_seconds(self) -> int:
        """
        Seconds until the token expires, or the configured expiry when it has none.
        """
        exp = self.claims.get("exp")
        if exp is None:
            return self._keeper.config.TOKEN_EXPIRE_SECONDS
        return int(exp) - now_epoch_seconds()

    def to_jwt(self) -> str:
        return encode_claims(
            self.claims,
            self.secret,
            self.cookie_secret,
            self._keeper.config.ALGORITHM,
        )

    def to_cookie(self) -> dict[str, Any]:
        return project_cookie(
            self.cookie_secret, self.claims.get("exp"), self._keeper.cookie_config
        )

    def is_version_mismatch(self) -> bool:
        """True when the token was minted under a different configured version."""
        return self.claims.get("ver") != self._keeper.config.JWT_VERSION

    async def is_pending(self) -> bool:
        return await self._keeper.store.is_pending(self.id)

    async def is_revoked(self) -> bool:
        return await self._keeper.store.is_revoked(self.id)

    async def is_invalid(self) -> bool:
        """
        Re-sign the in-memory claims and verify the result like a freshly received
        token, against the current configuration, then consult the revocation flag.
        """
        claims = self._keeper.decode(
            self.to_jwt(), secret=self.secret, cookie_secret=self.cookie_secret
        )
        if claims is None:
            return True
        return await self.is_revoked()

    async def is_valid(self) -> bool:
        return not await self.is_invalid()

    async def revoke(self) -> None:
        """
        Revoke this token until it would have expired anyway. Invalid tokens are left alone.
        """
        if await self.is_invalid():
            return
        await self._keeper.store.revoke(self.id, self.remaining_seconds())
        logger.info("Token %s revoked", self.id)

    async def rotate(self, new_claims: Mapping[str, Any] | None = None) -> Token:
        """
        Replace this token with a successor carrying its application claims.

        Tokens from another issuer are returned untouched. The current token id is
        revoked atomically first; if it was already revoked (for example by a
        concurrent rotation) the token is returned untouched as well. Compare ``id``
        before and after to tell whether rotation happened.

        Args:
            new_claims: Claims for the successor instead of the carried-over ones

        Returns:
            Token: ``self``, rotated in place when allowed
        """
        issuer = self._keeper.config.JWT_ISSUER
        if self.claims.get("iss") != issuer:
            logger.warning(
                "Refusing to rotate token %s: issuer %r is not %r",
                self.id,
                self.claims.get("iss"),
                issuer,
            )
            return self

        if not await self._claim_revocation():
            logger.info("Token %s already revoked, rotation skipped", self.id)
            return self

        if new_claims is None:
            new_claims = {
                k: v for k, v in self.claims.items() if k not in LIFECYCLE_CLAIMS
            }
        successor = self._keeper.create(new_claims)

        previous_id = self.id
        self.claims = successor.claims
        self.cookie_secret = successor.cookie_secret
        logger.info("Token %s rotated to %s", previous_id, self.id)
        return self

    async def _claim_revocation(self) -> bool:
        claims = self._keeper.decode(
            self.to_jwt(), secret=self.secret, cookie_secret=self.cookie_secret
        )
        if claims is None:
            # Expired or otherwise dead already; nothing left to revoke
            return True
        return await self._keeper.store.revoke_exclusive(
            self.id, self.remaining_seconds()
        )
