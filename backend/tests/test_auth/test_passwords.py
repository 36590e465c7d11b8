"""Unit tests for password hashing and verification."""

from cottagebook.auth.passwords import hash_password, verify_password


class TestHashPassword:
    """Test password hashing."""

    def test_hash_differs_from_plaintext(self) -> None:
        hashed = hash_password("mypassword")
        assert isinstance(hashed, str)
        assert hashed != "mypassword"

    def test_same_password_different_salts(self) -> None:
        assert hash_password("samepassword") != hash_password("samepassword")


class TestVerifyPassword:
    """Test password verification."""

    def test_correct_password_verifies(self) -> None:
        hashed = hash_password("testpass123")
        assert verify_password("testpass123", hashed) is True

    def test_wrong_password_fails(self) -> None:
        hashed = hash_password("testpass123")
        assert verify_password("wrongpassword", hashed) is False

    def test_unicode_password(self) -> None:
        hashed = hash_password("pässwördü")
        assert verify_password("pässwördü", hashed) is True
        assert verify_password("password", hashed) is False

    def test_password_longer_than_bcrypt_limit(self) -> None:
        long_pass = "a" * 100
        hashed = hash_password(long_pass)
        assert verify_password(long_pass, hashed) is True

    def test_account_without_hash_never_matches(self) -> None:
        assert verify_password("anything", None) is False
        assert verify_password("anything", "") is False
