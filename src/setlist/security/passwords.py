"""Password hashing: argon2id, with scrypt verification for older hashes.

New hashes are argon2id via ``argon2-cffi``. Hashes are PHC-format
strings, so each stored hash carries its own algorithm and parameters.
``verify_password`` picks the algorithm from the prefix, which keeps
``$scrypt$`` hashes written by earlier releases verifiable.

Usage::

    from setlist.security.passwords import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

import base64
import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# PHC format prefixes
_ARGON2_PREFIX = "$argon2"
_SCRYPT_PREFIX = "$scrypt$"

# Scrypt defaults for hashes that omit a parameter
_SCRYPT_N = 2**14  # CPU/memory cost
_SCRYPT_R = 8  # Block size
_SCRYPT_P = 1  # Parallelism

# argon2-cffi defaults (RFC 9106 low-memory profile); thread-safe
_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with argon2id.

    Returns a PHC-format string safe for storage, e.g.
    ``$argon2id$v=19$m=65536,t=3,p=4$<salt>$<hash>``.

    Raises ``ValueError`` for an empty password.
    """
    if not password:
        msg = "Password must not be empty."
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, phc_hash: str) -> bool:
    """Verify a password against a stored hash.

    Returns ``False`` for a wrong password or a malformed hash; raises
    ``ValueError`` for a hash in neither argon2 nor scrypt format.
    """
    if not password or not phc_hash:
        return False

    if phc_hash.startswith(_ARGON2_PREFIX):
        return _verify_argon2(password, phc_hash)

    if phc_hash.startswith(_SCRYPT_PREFIX):
        return _verify_scrypt(password, phc_hash)

    msg = f"Unknown hash format: {phc_hash[:20]}..."
    raise ValueError(msg)


def _verify_argon2(password: str, phc_hash: str) -> bool:
    try:
        return _hasher.verify(phc_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def _verify_scrypt(password: str, phc_hash: str) -> bool:
    # Format: $scrypt$n=N,r=R,p=P$salt_b64$dk_b64
    parts = phc_hash.split("$")
    if len(parts) != 5:
        return False

    try:
        params = {}
        for param in parts[2].split(","):
            key, _, value = param.partition("=")
            params[key] = int(value)

        salt = base64.b64decode(parts[3], validate=True)
        expected_dk = base64.b64decode(parts[4], validate=True)
    except ValueError:
        # int() and binascii.Error both raise ValueError subclasses
        return False

    dk = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=params.get("n", _SCRYPT_N),
        r=params.get("r", _SCRYPT_R),
        p=params.get("p", _SCRYPT_P),
        dklen=len(expected_dk),
    )

    return hmac.compare_digest(dk, expected_dk)
