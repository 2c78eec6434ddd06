"""Tests for key generation, hashing and password helpers."""

import re

from fittrack.core.security import (
    generate_api_key,
    get_password_hash,
    hash_api_key,
    verify_password,
)


class TestApiKeyMaterial:
    """Generated keys are full-entropy lowercase hex."""

    def test_generated_key_is_64_hex_chars(self):
        key = generate_api_key()

        assert len(key) == 64
        assert re.fullmatch(r"[0-9a-f]{64}", key)

    def test_generated_keys_are_distinct(self):
        keys = {generate_api_key() for _ in range(200)}

        assert len(keys) == 200


class TestApiKeyHash:
    """SHA-256 digest used for key lookup."""

    def test_hash_is_deterministic(self):
        key = generate_api_key()

        assert hash_api_key(key) == hash_api_key(key)

    def test_hash_is_lowercase_hex_sha256(self):
        assert hash_api_key("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_distinct_keys_hash_differently(self):
        first, second = generate_api_key(), generate_api_key()

        assert hash_api_key(first) != hash_api_key(second)

    def test_hash_never_contains_plaintext(self):
        key = generate_api_key()

        assert key not in hash_api_key(key)


class TestPasswords:
    def test_password_roundtrip(self):
        hashed = get_password_hash("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)
