"""Tests for GitHub App JWT generation."""

from unittest.mock import patch

import jwt
import pytest

from ghdefaults.errors import AuthConfigInvalid
from ghdefaults.github.auth import create_app_jwt
from tests.conftest import TEST_PRIVATE_KEY


class TestCreateAppJwt:
    @patch("ghdefaults.github.auth.get_settings")
    def test_creates_valid_jwt(self, mock_settings):
        mock_settings.return_value.github_app_id = 12345
        mock_settings.return_value.github_private_key = TEST_PRIVATE_KEY

        token = create_app_jwt()
        assert isinstance(token, str)
        assert jwt.get_unverified_header(token)["alg"] == "RS256"

    @patch("ghdefaults.github.auth.get_settings")
    def test_jwt_contains_app_id_as_issuer(self, mock_settings):
        mock_settings.return_value.github_app_id = 12345
        mock_settings.return_value.github_private_key = TEST_PRIVATE_KEY

        token = create_app_jwt()
        decoded = jwt.decode(token, options={"verify_signature": False})
        assert decoded["iss"] == "12345"

    @patch("ghdefaults.github.auth.get_settings")
    def test_jwt_expiry_is_roughly_9_minutes(self, mock_settings):
        mock_settings.return_value.github_app_id = 12345
        mock_settings.return_value.github_private_key = TEST_PRIVATE_KEY

        token = create_app_jwt()
        decoded = jwt.decode(token, options={"verify_signature": False})

        # exp - iat should be ~10 minutes (9 min + 60s backdate)
        duration = decoded["exp"] - decoded["iat"]
        assert 540 <= duration <= 600

    @patch("ghdefaults.github.auth.get_settings")
    def test_missing_credentials_raises(self, mock_settings):
        mock_settings.return_value.github_app_id = 0
        mock_settings.return_value.github_private_key = ""

        with pytest.raises(AuthConfigInvalid, match="GitHub App credentials"):
            create_app_jwt()

    @patch("ghdefaults.github.auth.get_settings")
    def test_unparseable_key_raises_without_leaking_it(self, mock_settings):
        mock_settings.return_value.github_app_id = 12345
        mock_settings.return_value.github_private_key = "not-a-pem-key\n"

        with pytest.raises(AuthConfigInvalid) as exc_info:
            create_app_jwt()
        assert "not-a-pem-key" not in str(exc_info.value)
        assert exc_info.value.__cause__ is None

    @patch("ghdefaults.github.auth.get_settings")
    def test_claims_for_fixed_clock(self, mock_settings):
        mock_settings.return_value.github_app_id = 12345
        mock_settings.return_value.github_private_key = TEST_PRIVATE_KEY

        token = create_app_jwt(now=1_700_000_000)
        decoded = jwt.decode(
            token, options={"verify_signature": False, "verify_exp": False}
        )
        assert decoded["iat"] == 1_700_000_000 - 60
        assert decoded["exp"] == 1_700_000_000 + 540
