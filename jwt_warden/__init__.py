from jwt_warden.core.errors.exceptions import (
    CoreException,
    TokenDecodeError,
    UnauthorizedException,
)
from jwt_warden.core.flags.interface import FlagStore
from jwt_warden.core.flags.redis_store import RedisFlagStore
from jwt_warden.main.config import Config, CookieConfig, JWTConfig, get_settings
from jwt_warden.token.keeper import TokenKeeper
from jwt_warden.token.token import Token

__all__ = [
    "Config",
    "CookieConfig",
    "CoreException",
    "FlagStore",
    "JWTConfig",
    "RedisFlagStore",
    "Token",
    "TokenDecodeError",
    "TokenKeeper",
    "UnauthorizedException",
    "get_settings",
]
