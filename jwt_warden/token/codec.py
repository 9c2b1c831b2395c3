"""
Signing and verification of compact token strings.

The HMAC key is the server secret followed by the optional cookie secret, so a
token signed in cookie-lock mode only verifies for someone holding both halves.
"""

from collections.abc import Mapping
from typing import Any

import jwt

from jwt_warden.core.errors.exceptions import TokenDecodeError
from jwt_warden.core.utils.security import combine_signing_key
from jwt_warden.token.jwt_payload_schema import ClaimSet
from loggers import get_logger

logger = get_logger(__name__)

DECODE_OPTIONS: dict[str, Any] = {
    "verify_signature": True,
    "verify_exp": True,
    "verify_nbf": True,
    "verify_iat": True,
    "verify_iss": True,
    "verify_aud": True,
    "verify_sub": False,
    "verify_jti": False,
}


def encode_claims(
    claims: Mapping[str, Any],
    secret: str | None,
    cookie_secret: str | None,
    algorithm: str,
) -> str:
    """
    Sign a claim set. Claims whose value is ``None`` are left out of the payload.
    """
    payload = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(
        payload, combine_signing_key(secret, cookie_secret), algorithm=algorithm
    )


def decode_or_raise(
    raw_token: str | bytes,
    *,
    secret: str | None,
    cookie_secret: str | None,
    algorithm: str,
    issuer: str | None,
    audience: str | None,
) -> ClaimSet:
    """
    Verify a token string and return its claims.

    Checks the signature, issuer, audience, issued-at, not-before and expiry with no
    leeway. Subject and token id are not checked here.

    Raises:
        TokenDecodeError: If any check fails or the input is not a token
    """
    try:
        claims = jwt.decode(
            raw_token,
            combine_signing_key(secret, cookie_secret),
            algorithms=[algorithm],
            issuer=issuer,
            audience=audience,
            leeway=0,
            options=DECODE_OPTIONS,  # type: ignore[arg-type]
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenDecodeError("expired") from exc
    except jwt.ImmatureSignatureError as exc:
        raise TokenDecodeError("not yet valid") from exc
    except jwt.InvalidIssuerError as exc:
        raise TokenDecodeError("issuer mismatch") from exc
    except jwt.InvalidAudienceError as exc:
        raise TokenDecodeError("audience mismatch") from exc
    except jwt.InvalidSignatureError as exc:
        raise TokenDecodeError("bad signature") from exc
    except jwt.PyJWTError as exc:
        raise TokenDecodeError("malformed", str(exc)) from exc
    return dict(claims)


def decode_claims(
    raw_token: str | bytes | None,
    *,
    secret: str | None,
    cookie_secret: str | None,
    algorithm: str,
    issuer: str | None,
    audience: str | None,
) -> ClaimSet | None:
    """
    Verify a token string, returning ``None`` instead of raising when it is unusable.
    """
    if not raw_token:
        return None
    try:
        return decode_or_raise(
            raw_token,
            secret=secret,
            cookie_secret=cookie_secret,
            algorithm=algorithm,
            issuer=issuer,
            audience=audience,
        )
    except TokenDecodeError as exc:
        logger.debug("Token rejected: %s", exc.message)
        return None
