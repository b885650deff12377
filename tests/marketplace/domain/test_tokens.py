"""Session token issuing and verification."""

import base64
import json
from types import SimpleNamespace

import pytest

from marketplace.errors import AuthenticationError
from marketplace.identity.passwords import hash_password, verify_password
from marketplace.identity.tokens import decode_token, issue_token

NOW = 1_763_600_000
WEEK = 7 * 24 * 60 * 60


@pytest.fixture()
def user():
    return SimpleNamespace(
        id="user-1",
        role="farmer",
        full_name="Ravi Kumar",
        profile_picture="https://cdn.example.com/ravi.jpg",
    )


def _payload(token):
    segment = token.split(".")[1]
    return json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))


class TestIssueToken:
    def test_payload_carries_identity_claims(self, user):
        payload = _payload(issue_token(user, now=NOW))

        assert payload["userId"] == "user-1"
        assert payload["role"] == "farmer"
        assert payload["name"] == "Ravi Kumar"
        assert payload["avatar"] == "https://cdn.example.com/ravi.jpg"
        assert payload["iat"] == NOW

    def test_expires_after_seven_days(self, user):
        payload = _payload(issue_token(user, now=NOW))
        assert payload["exp"] == NOW + WEEK


class TestDecodeToken:
    def test_round_trip(self, user):
        claims = decode_token(issue_token(user, now=NOW), now=NOW + 60)

        assert claims.user_id == "user-1"
        assert claims.role == "farmer"
        assert claims.expires_at == NOW + WEEK

    def test_expired_token_is_rejected(self, user):
        token = issue_token(user, now=NOW)
        with pytest.raises(AuthenticationError, match="expired"):
            decode_token(token, now=NOW + WEEK + 1)

    def test_tampered_payload_is_rejected(self, user):
        header, _, signature = issue_token(user, now=NOW).split(".")
        forged = base64.urlsafe_b64encode(
            json.dumps({"userId": "user-1", "role": "admin", "exp": NOW + WEEK}).encode()
        ).rstrip(b"=")

        with pytest.raises(AuthenticationError):
            decode_token(f"{header}.{forged.decode()}.{signature}", now=NOW)

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c", "!!!.###.$$$"])
    def test_malformed_tokens_are_rejected(self, token):
        with pytest.raises(AuthenticationError):
            decode_token(token, now=NOW)

    def test_authentication_error_maps_to_401(self):
        assert AuthenticationError("x").status_code == 401


class TestPasswords:
    def test_hash_verifies(self):
        hashed = hash_password("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert verify_password(hashed, "s3cret-pass")

    def test_wrong_password_fails(self):
        assert not verify_password(hash_password("s3cret-pass"), "guess")

    def test_garbage_hash_fails(self):
        assert not verify_password("not-a-hash", "s3cret-pass")
