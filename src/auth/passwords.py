"""bcrypt password hashing.

Users provisioned from the identity provider store IDP_PASSWORD_PLACEHOLDER,
which is not a bcrypt hash, so verify_password always rejects it.
"""

import bcrypt

IDP_PASSWORD_PLACEHOLDER = "idp-auth"

# bcrypt only reads the first 72 bytes, and bcrypt 5 rejects longer input.
MAX_PASSWORD_BYTES = 72


def check_password_length(plain_password: str) -> str:
    """Validator helper: ValueError when the UTF-8 encoding exceeds bcrypt's limit."""
    if len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        msg = f"password must be at most {MAX_PASSWORD_BYTES} bytes"
        raise ValueError(msg)
    return plain_password


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password. The returned string embeds salt and cost."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password.startswith("$2"):
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Malformed hash in the row.
        return False
