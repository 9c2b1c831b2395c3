from typing import Annotated, cast

from fastapi import Depends, Request, Response
from redis.exceptions import RedisError

from jwt_warden.core.errors.exceptions import (
    InfrastructureException,
    UnauthorizedException,
)
from jwt_warden.token.jwt_payload_schema import LIFECYCLE_CLAIMS
from jwt_warden.token.keeper import TokenKeeper
from jwt_warden.token.token import Token
from loggers import get_logger

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_SCHEME = "bearer"


async def get_token_keeper(request: Request) -> TokenKeeper:
    """
    Provide the token keeper stored on app.state.
    """
    keeper = getattr(request.app.state, "token_keeper", None)
    if keeper is None:
        raise RuntimeError(
            "Token keeper is not initialized. Ensure startup lifecycle ran."
        )
    return cast(TokenKeeper, keeper)


def extract_bearer_token(header_value: str | None) -> str | None:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header value.
    """
    if not header_value:
        return None
    scheme, _, credentials = header_value.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME or not credentials.strip():
        return None
    return credentials.strip()


def write_authentication_token(response: Response, token: Token) -> None:
    """
    Hand a token back to the client: the header always, the cookie in cookie-lock mode.
    """
    response.headers[AUTHORIZATION_HEADER] = f"Bearer {token.to_jwt()}"
    if token.keeper.config.COOKIE_LOCK:
        response.set_cookie(**token.to_cookie())


async def clear_authentication_token(response: Response, token: Token) -> None:
    """
    Sign out: revoke the token and drop the companion cookie.
    """
    await token.revoke()
    cookie_config = token.keeper.cookie_config
    if token.keeper.config.COOKIE_LOCK:
        response.delete_cookie(
            cookie_config.COOKIE_NAME,
            path=cookie_config.COOKIE_PATH,
            domain=cookie_config.COOKIE_DOMAIN,
            secure=cookie_config.COOKIE_SECURE,
            httponly=cookie_config.COOKIE_HTTPONLY,
            samesite=cookie_config.COOKIE_SAMESITE,
        )


async def require_authentication(
    request: Request,
    response: Response,
    keeper: Annotated[TokenKeeper, Depends(get_token_keeper)],
) -> Token:
    """
    Resolve the request's token or reject the request with 401.

    Tokens marked for rotation, or minted under an older configured version, are
    rotated on the spot and the successor is written to the response.
    A flag store outage surfaces as ``InfrastructureException`` (500).
    """
    raw_token = extract_bearer_token(request.headers.get(AUTHORIZATION_HEADER))
    if raw_token is None:
        raise UnauthorizedException("Missing bearer token")

    cookie_secret = None
    if keeper.config.COOKIE_LOCK:
        cookie_secret = request.cookies.get(keeper.cookie_config.COOKIE_NAME)
        if not cookie_secret:
            raise UnauthorizedException("Missing authentication cookie")

    try:
        token = await keeper.find(raw_token, cookie_secret=cookie_secret)
        if token is None:
            raise UnauthorizedException("Invalid or revoked token")
        await _rotate_if_due(token, response)
    except RedisError as exc:
        raise InfrastructureException(
            "Flag store unavailable",
            additional_info={"error": type(exc).__name__},
        ) from exc
    return token


async def _rotate_if_due(token: Token, response: Response) -> None:
    stale_version = token.is_version_mismatch()
    if stale_version or await token.is_pending():
        previous_id = token.id
        if stale_version:
            # successor must pick up the configured ver
            await token.rotate(
                {
                    key: value
                    for key, value in token.claims.items()
                    if key not in LIFECYCLE_CLAIMS | {"ver"}
                }
            )
        else:
            await token.rotate()
        if token.id != previous_id:
            write_authentication_token(response, token)
        else:
            logger.warning("Token %s needed rotation but was not rotated", previous_id)


AuthenticatedToken = Annotated[Token, Depends(require_authentication)]
