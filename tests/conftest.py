"""Shared fixtures for zosctl tests.

Every test runs with HOME and ZOSCTL_CONFIG_DIR pointing into a temporary
directory, so no test reads or writes a real ~/.zosctl. No test talks to a
real z/OSMF: wrappers are tested with ZosmfRestClient patched, and the REST
client itself with requests patched.
"""

import logging

import pytest

from zosctl.retry_config import reset_retry_config
from zosctl.session import AuthType, Session

ZOSCTL_ENV_VARS = (
    "ZOSCTL_PROFILE",
    "ZOSCTL_HOST",
    "ZOSCTL_PORT",
    "ZOSCTL_USER",
    "ZOSCTL_PASSWORD",
    "ZOSCTL_PROTOCOL",
    "ZOSCTL_BASE_PATH",
    "ZOSCTL_REJECT_UNAUTHORIZED",
    "ZOSCTL_TOKEN_TYPE",
    "ZOSCTL_TOKEN_VALUE",
    "ZOSCTL_WATCH_DELAY",
    "ZOSCTL_WATCH_ATTEMPTS",
    "ZOSCTL_LOG_LEVEL",
    "ZOSCTL_LOG_FILE",
    "ZOSCTL_TSO_ACCOUNT",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Point HOME and the zosctl config directory at a temporary directory."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("ZOSCTL_CONFIG_DIR", str(home / ".zosctl"))
    for name in ZOSCTL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Retries would sleep between attempts
    monkeypatch.setenv("ZOSCTL_RETRY_MAX_ATTEMPTS", "1")
    reset_retry_config()
    yield home / ".zosctl"
    reset_retry_config()


@pytest.fixture(autouse=True)
def restore_zosctl_logger():
    """Undo handlers and levels installed by CLI invocations."""
    logger = logging.getLogger("zosctl")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def session():
    """Basic-auth session for a fictitious z/OSMF."""
    return Session(
        hostname="mf.example.com",
        port=443,
        user="ibmuser",
        password="secret",
        auth_type=AuthType.BASIC,
    )


@pytest.fixture
def token_session():
    return Session(
        hostname="mf.example.com",
        token_type="LtpaToken2",
        token_value="tok123",
        auth_type=AuthType.TOKEN,
    )
