import secrets

COOKIE_SECRET_BYTES = 16


def generate_cookie_secret(nbytes: int = COOKIE_SECRET_BYTES) -> str:
    """
    Generate the per-token half of a split signing key.

    :param nbytes: Entropy in bytes; the hex result is twice as long.
    :return: A random hex string.
    """
    return secrets.token_hex(nbytes)


def combine_signing_key(secret: str | None, cookie_secret: str | None) -> str:
    """
    Join the server-held secret and the cookie secret into the HMAC key.

    Either half may be missing; a missing half contributes nothing.
    """
    return f"{secret or ''}{cookie_secret or ''}"
