"""Tests for setlist.security.passwords."""

import base64
import hashlib

import pytest

from setlist.security.passwords import hash_password, verify_password


def scrypt_hash(password: str, salt: bytes = b"0123456789abcdef") -> str:
    """A hash in the ``$scrypt$`` format earlier releases stored."""
    dk = hashlib.scrypt(password.encode("utf-8"), salt=salt, n=2**14, r=8, p=1, dklen=64)
    salt_b64 = base64.b64encode(salt).decode("ascii")
    dk_b64 = base64.b64encode(dk).decode("ascii")
    return f"$scrypt$n=16384,r=8,p=1${salt_b64}${dk_b64}"


class TestPasswords:
    def test_hash_is_argon2id(self) -> None:
        hashed = hash_password("correct horse")
        assert hashed.startswith("$argon2id$")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_salted(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_empty_password_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_password("")

    def test_empty_inputs_do_not_verify(self) -> None:
        assert not verify_password("", hash_password("x"))
        assert not verify_password("x", "")

    def test_malformed_argon2_hash(self) -> None:
        assert not verify_password("x", "$argon2id$garbage")

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown hash format"):
            verify_password("x", "$2b$12$abcdefghijklmnopqrstuv")


class TestScryptHashes:
    def test_existing_scrypt_hash_verifies(self) -> None:
        hashed = scrypt_hash("correct horse")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_malformed_scrypt_hash(self) -> None:
        assert not verify_password("x", "$scrypt$n=abc$AAAA$AAAA")
        assert not verify_password("x", "$scrypt$only-three")
