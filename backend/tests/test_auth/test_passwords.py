"""Unit tests for password hashing and verification."""

from villa_ledger.auth.passwords import hash_password, verify_password

# Low work factor keeps the suite fast; production uses settings.bcrypt_rounds.
ROUNDS = 4


class TestHashPassword:
    """Test password hashing."""

    def test_hash_differs_from_plaintext(self):
        hashed = hash_password("mypassword", rounds=ROUNDS)
        assert isinstance(hashed, str)
        assert hashed != "mypassword"

    def test_same_password_different_salts(self):
        """Hashing the same password twice should produce different hashes (different salts)."""
        assert hash_password("samepassword", rounds=ROUNDS) != hash_password("samepassword", rounds=ROUNDS)

    def test_rounds_recorded_in_hash(self):
        assert hash_password("mypassword", rounds=ROUNDS).startswith("$2b$04$")


class TestVerifyPassword:
    """Test password verification."""

    def test_correct_password_verifies(self):
        hashed = hash_password("testpass123", rounds=ROUNDS)
        assert verify_password("testpass123", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("testpass123", rounds=ROUNDS)
        assert verify_password("wrongpassword", hashed) is False

    def test_unicode_password(self):
        hashed = hash_password("pässwördü", rounds=ROUNDS)
        assert verify_password("pässwördü", hashed) is True
        assert verify_password("password", hashed) is False

    def test_not_a_bcrypt_hash(self):
        assert verify_password("testpass123", "plaintext-not-a-hash") is False
