from typing import Any

# Reserved keys: jti, iat, nbf, exp, iss, aud, ver. Application claims sit alongside.
ClaimSet = dict[str, Any]

# Claims minted fresh for every token and never carried over by rotation
LIFECYCLE_CLAIMS = frozenset({"iss", "aud", "exp", "nbf", "iat", "jti"})
