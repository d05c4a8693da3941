"""Tests for profile storage and resolution."""

import stat

import pytest

from zosctl.config_manager import ConfigError, ConfigManager
from zosctl.session import AuthType, ZosmfSession


class TestProfiles:
    def test_missing_config_gives_default_profile(self):
        profile = ConfigManager.get_profile()
        assert profile.name == "default"
        assert profile.host is None
        assert profile.port == 443

    def test_first_profile_becomes_default(self):
        ConfigManager.set_profile_values("lpar1", host="mf1", port="10443")
        config = ConfigManager.load_config()
        assert config.default_profile == "lpar1"
        profile = ConfigManager.get_profile()
        assert profile.name == "lpar1"
        assert profile.port == 10443

    def test_config_file_is_owner_only(self, isolated_config):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        mode = stat.S_IMODE(ConfigManager.get_config_path().stat().st_mode)
        assert mode == 0o600

    def test_secrets_are_refused(self):
        with pytest.raises(ConfigError, match="ZOSCTL_PASSWORD"):
            ConfigManager.set_profile_values("lpar1", password="secret")

    def test_unknown_key_is_refused(self):
        with pytest.raises(ConfigError, match="Unknown profile property"):
            ConfigManager.set_profile_values("lpar1", colour="blue")

    def test_boolean_coercion(self):
        ConfigManager.set_profile_values("lpar1", host="mf1", reject_unauthorized="false")
        assert ConfigManager.get_profile("lpar1").reject_unauthorized is False

    def test_invalid_boolean(self):
        with pytest.raises(ConfigError, match="Invalid boolean"):
            ConfigManager.set_profile_values("lpar1", reject_unauthorized="maybe")

    def test_unset_value(self):
        ConfigManager.set_profile_values("lpar1", host="mf1", user="u")
        ConfigManager.set_profile_values("lpar1", user=None)
        assert ConfigManager.get_profile("lpar1").user is None

    def test_named_profile_must_exist(self):
        with pytest.raises(ConfigError, match="not found"):
            ConfigManager.get_profile("nope")

    def test_remove_profile_moves_default_and_deletes_token(self):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        ConfigManager.set_profile_values("lpar2", host="mf2")
        ConfigManager.save_token("lpar1", "LtpaToken2", "tok")

        ConfigManager.remove_profile("lpar1")

        assert ConfigManager.list_profiles() == ["lpar2"]
        assert ConfigManager.load_config().default_profile == "lpar2"
        assert ConfigManager.load_token("lpar1") is None

    def test_set_default_profile(self):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        ConfigManager.set_profile_values("lpar2", host="mf2")
        ConfigManager.set_default_profile("lpar2")
        assert ConfigManager.get_profile().name == "lpar2"

    def test_comments_survive_updates(self):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        path = ConfigManager.get_config_path()
        path.write_text("# my mainframes\n" + path.read_text())
        ConfigManager.set_profile_values("lpar1", user="u")
        assert path.read_text().startswith("# my mainframes")


class TestTokens:
    def test_round_trip(self):
        path = ConfigManager.save_token("lpar1", "jwtToken", "abc")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert ConfigManager.load_token("lpar1") == ("jwtToken", "abc")
        assert ConfigManager.delete_token("lpar1") is True
        assert ConfigManager.delete_token("lpar1") is False


class TestResolveProfile:
    def test_precedence_cli_over_env_over_profile(self, monkeypatch):
        ConfigManager.set_profile_values("lpar1", host="from-profile", port=1, user="profile-user")
        monkeypatch.setenv("ZOSCTL_PORT", "2")
        monkeypatch.setenv("ZOSCTL_USER", "env-user")

        profile = ConfigManager.resolve_profile("lpar1", user="cli-user", port=None)

        assert profile.host == "from-profile"
        assert profile.port == 2
        assert profile.user == "cli-user"

    def test_password_from_environment(self, monkeypatch):
        monkeypatch.setenv("ZOSCTL_PASSWORD", "pw")
        assert ConfigManager.resolve_profile(None, host="mf").password == "pw"

    def test_stored_token_is_used(self):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        ConfigManager.save_token("lpar1", "LtpaToken2", "tok")
        profile = ConfigManager.resolve_profile("lpar1")
        assert profile.token_type == "LtpaToken2"
        assert profile.token_value == "tok"

    def test_cli_credentials_outrank_stored_token(self):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        ConfigManager.save_token("lpar1", "LtpaToken2", "stale")
        profile = ConfigManager.resolve_profile("lpar1", user="cli-user", password="cli-pw")

        assert profile.token_value is None
        session = ZosmfSession.from_profile(profile)
        assert session.auth_type == AuthType.BASIC
        assert session.user == "cli-user"

    def test_env_credentials_outrank_stored_token(self, monkeypatch):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        ConfigManager.save_token("lpar1", "LtpaToken2", "stale")
        monkeypatch.setenv("ZOSCTL_USER", "env-user")
        monkeypatch.setenv("ZOSCTL_PASSWORD", "env-pw")

        assert ConfigManager.resolve_profile("lpar1").token_value is None

    def test_explicit_token_kept_alongside_credentials(self):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        profile = ConfigManager.resolve_profile(
            "lpar1", user="u", token_type="LtpaToken2", token_value="fresh"
        )
        assert profile.token_value == "fresh"

    def test_profile_from_environment(self, monkeypatch):
        ConfigManager.set_profile_values("lpar1", host="mf1")
        ConfigManager.set_profile_values("lpar2", host="mf2")
        monkeypatch.setenv("ZOSCTL_PROFILE", "lpar2")
        assert ConfigManager.resolve_profile().host == "mf2"
