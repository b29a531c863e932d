import pytest

from studio_cms.config import settings
from studio_cms.utils.auth import hash_password, verify_admin_password, verify_password
from studio_cms.utils.rate_limit import get_client_identifier

from conftest import ADMIN_PASSWORD


class TestPasswords:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("s3cret", rounds=4)

        assert verify_password("s3cret", hashed) is True
        assert verify_password("other", hashed) is False

    def test_malformed_hash(self) -> None:
        assert verify_password("s3cret", "not-a-bcrypt-hash") is False

    def test_admin_password(self) -> None:
        assert verify_admin_password(ADMIN_PASSWORD) is True

    def test_admin_password_not_configured(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", "")

        with pytest.raises(ValueError):
            verify_admin_password(ADMIN_PASSWORD)


class _FakeRequest:
    def __init__(self, headers, host="10.0.0.9"):
        self.headers = headers
        self.client = type("Client", (), {"host": host})()


class TestClientIdentifier:
    def test_forwarded_for(self) -> None:
        request = _FakeRequest({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

        assert get_client_identifier(request) == "203.0.113.7"

    def test_remote_address(self) -> None:
        assert get_client_identifier(_FakeRequest({})) == "10.0.0.9"
