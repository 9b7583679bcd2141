"""
Tests for bcrypt credential hashing.
"""

import pytest

from auth.password import CredentialVerifier, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_is_not_cleartext(self):
        hashed = hash_password("hunter2-hunter2", rounds=4)
        assert hashed != "hunter2-hunter2"
        assert hashed.startswith("$2")

    def test_hashes_are_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_verify(self):
        hashed = hash_password("correct horse", rounds=4)
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_malformed_hash_is_false(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")
        assert not verify_password("anything", "")

    def test_blank_password_refused(self):
        with pytest.raises(ValueError):
            hash_password("", rounds=4)


class TestCredentialVerifier:
    def test_check_uses_stored_hash(self):
        verifier = CredentialVerifier(rounds=4)
        stored = verifier.hash("s3cret")
        assert verifier.check(stored, "s3cret")
        assert not verifier.check(stored, "S3cret")

    def test_reject_never_matches(self):
        verifier = CredentialVerifier(rounds=4)
        assert verifier.reject("anything") is False
        assert verifier.reject("") is False
