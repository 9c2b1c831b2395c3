from typing import Any

from jwt_warden.core.utils.datetime_utils import from_epoch_seconds
from jwt_warden.main.config import CookieConfig


def project_cookie(
    cookie_secret: str | None,
    exp: int | None,
    cookie_config: CookieConfig,
) -> dict[str, Any]:
    """
    Describe the cookie carrying a token's cookie secret.

    The result can be splatted into ``Response.set_cookie``: ``value`` and
    ``expires`` (the token expiry as an aware UTC datetime) merged with the
    configured cookie options.
    """
    cookie: dict[str, Any] = {
        "value": cookie_secret,
        "expires": from_epoch_seconds(exp) if exp is not None else None,
    }
    cookie.update(cookie_config.options())
    return cookie
