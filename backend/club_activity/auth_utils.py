import hashlib
import os
import secrets


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    digest = hashlib.sha256(salt + password.encode()).hexdigest()
    return f"{salt.hex()}:{digest}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        salt_hex, stored_digest = hashed_password.split(":", 1)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    computed = hashlib.sha256(salt + plain_password.encode()).hexdigest()
    return secrets.compare_digest(computed, stored_digest)


def new_session_id() -> str:
    """Opaque session token handed to the client after login."""
    return secrets.token_hex(32)


def session_matches(stored: str | None, presented: str | None) -> bool:
    if not stored or not presented:
        return False
    return secrets.compare_digest(stored, presented)
