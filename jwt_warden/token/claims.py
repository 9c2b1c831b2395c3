"""
Claim assembly for new tokens.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any
from uuid import uuid4

from jwt_warden.core.utils.datetime_utils import get_utc_now, to_epoch_seconds
from jwt_warden.main.config import JWTConfig
from jwt_warden.token.jwt_payload_schema import ClaimSet


def build_claims(
    config: JWTConfig,
    overrides: Mapping[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> ClaimSet:
    """
    Build the claim set of a new token.

    Layers, later ones winning: ``nbf``/``iat``/``jti`` defaults, the configured base
    claims (issuer, audience, expiry, version and any extra base claims), then the
    caller's overrides. An ``exp`` given as a date or datetime is normalized to epoch
    seconds.

    Args:
        config: Token configuration providing the base claims
        overrides: Caller supplied claims
        now: Issuance time, defaults to the current UTC time

    Returns:
        ClaimSet: A new claim mapping owned by the caller
    """
    now = now or get_utc_now()
    issued_at = int(now.timestamp())

    claims: ClaimSet = {
        "nbf": issued_at,
        "iat": issued_at,
        "jti": str(uuid4()),
    }
    claims.update(config.base_claims(now))
    if overrides:
        claims.update(overrides)

    if isinstance(claims.get("exp"), (datetime, date)):
        claims["exp"] = to_epoch_seconds(claims["exp"])

    return claims
