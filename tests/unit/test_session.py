"""Tests for session construction."""

import pytest

from zosctl.config_manager import ProfileConfig
from zosctl.errors import ValidationError
from zosctl.session import AuthType, Session, TokenType, ZosmfSession


class TestSession:
    def test_base_url_defaults(self):
        session = Session(hostname="mf.example.com")
        assert session.base_url == "https://mf.example.com:443"

    def test_base_url_adds_leading_slash_to_base_path(self):
        session = Session(hostname="gw", port=7554, base_path="ibmzosmf/api/v1/")
        assert session.base_url == "https://gw:7554/ibmzosmf/api/v1"

    def test_blank_hostname_rejected(self):
        with pytest.raises(ValidationError):
            Session(hostname="")

    def test_unknown_protocol_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported protocol"):
            Session(hostname="mf", protocol="ftp")

    def test_with_token_returns_new_session(self, session):
        token_session = session.with_token(TokenType.JWT, "abc")
        assert token_session is not session
        assert token_session.auth_type == AuthType.TOKEN
        assert token_session.token_value == "abc"
        assert session.auth_type == AuthType.BASIC
        assert session.token_value is None

    def test_with_token_bearer(self, session):
        assert session.with_token(TokenType.BEARER, "abc").auth_type == AuthType.BEARER

    def test_sessions_are_immutable(self, session):
        with pytest.raises(AttributeError):
            session.port = 8443

    def test_repr_hides_password(self, session):
        assert "secret" not in repr(session)


class TestZosmfSession:
    def test_from_args_basic(self):
        session = ZosmfSession.from_args(host="mf", user="u", password="p")
        assert session.auth_type == AuthType.BASIC
        assert session.port == 443
        assert session.reject_unauthorized is True

    def test_from_args_token_wins_over_basic(self):
        session = ZosmfSession.from_args(
            host="mf", user="u", password="p", token_type=TokenType.LTPA2, token_value="t"
        )
        assert session.auth_type == AuthType.TOKEN

    def test_from_args_empty_token_value_falls_back_to_basic(self):
        session = ZosmfSession.from_args(
            host="mf", user="u", password="p", token_type=TokenType.LTPA2, token_value=""
        )
        assert session.auth_type == AuthType.BASIC
        assert session.token_value is None

    def test_from_args_requires_host(self):
        with pytest.raises(ValidationError, match="No z/OSMF host"):
            ZosmfSession.from_args(host=None)

    def test_from_profile(self):
        profile = ProfileConfig(
            name="lpar1", host="mf", port=10443, user="u", password="p", reject_unauthorized=False
        )
        session = ZosmfSession.from_profile(profile)
        assert session.port == 10443
        assert session.reject_unauthorized is False
        assert session.auth_type == AuthType.BASIC
