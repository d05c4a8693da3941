"""z/OSMF connection sessions.

A Session holds everything needed to reach one z/OSMF instance: host, port,
protocol, base path, TLS trust policy and either basic credentials or an
authentication token. Sessions are immutable; deriving a token session from a
basic one returns a new object.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from zosctl.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 443
DEFAULT_PROTOCOL = "https"


class AuthType(str, Enum):
    """How a session authenticates its requests."""

    NONE = "none"
    BASIC = "basic"
    TOKEN = "token"
    BEARER = "bearer"


class TokenType:
    """Well-known token (cookie) names."""

    LTPA2 = "LtpaToken2"
    JWT = "jwtToken"
    APIML = "apimlAuthenticationToken"
    BEARER = "bearer"

    ALL = (LTPA2, JWT, APIML, BEARER)


@dataclass(frozen=True)
class Session:
    """Connection parameters for one z/OSMF instance.

    Attributes:
        hostname: z/OSMF host name
        port: z/OSMF port (default 443)
        protocol: http or https
        user: User ID for basic authentication
        password: Password for basic authentication
        token_type: Cookie name of the token (LtpaToken2, jwtToken, ...)
        token_value: Token value
        reject_unauthorized: Verify the server certificate chain
        base_path: Prefix for all resources (API mediation layer)
        auth_type: Effective authentication type
    """

    hostname: str
    port: int = DEFAULT_PORT
    protocol: str = DEFAULT_PROTOCOL
    user: str | None = None
    password: str | None = None
    token_type: str | None = None
    token_value: str | None = None
    reject_unauthorized: bool = True
    base_path: str = ""
    auth_type: AuthType = AuthType.NONE

    def __post_init__(self):
        if not self.hostname:
            raise ValidationError("Expect Error: Required parameter 'hostname' must not be blank")
        if self.protocol not in ("http", "https"):
            raise ValidationError(f"Unsupported protocol '{self.protocol}'. Use http or https.")

    @property
    def base_url(self) -> str:
        base_path = self.base_path.rstrip("/") if self.base_path else ""
        if base_path and not base_path.startswith("/"):
            base_path = "/" + base_path
        return f"{self.protocol}://{self.hostname}:{self.port}{base_path}"

    def with_token(self, token_type: str, token_value: str) -> "Session":
        """Return a copy of this session that authenticates with a token."""
        auth_type = AuthType.BEARER if token_type == TokenType.BEARER else AuthType.TOKEN
        return replace(
            self,
            token_type=token_type,
            token_value=token_value,
            auth_type=auth_type,
        )

    def with_basic(self) -> "Session":
        """Return a copy that authenticates with user and password only."""
        return replace(self, token_value=None, auth_type=AuthType.BASIC)

    def __repr__(self) -> str:
        # Keep secrets out of reprs that end up in logs and tracebacks
        return (
            f"Session(hostname={self.hostname!r}, port={self.port}, protocol={self.protocol!r}, "
            f"user={self.user!r}, auth_type={self.auth_type.value!r}, "
            f"token_type={self.token_type!r}, reject_unauthorized={self.reject_unauthorized}, "
            f"base_path={self.base_path!r})"
        )


class ZosmfSession:
    """Builders that turn loose connection arguments into a Session."""

    @classmethod
    def from_args(
        cls,
        host: str | None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        reject_unauthorized: bool | None = None,
        base_path: str | None = None,
        protocol: str | None = None,
        token_type: str | None = None,
        token_value: str | None = None,
    ) -> Session:
        """Create a session from command arguments.

        Basic authentication is used unless both a token type and a non-empty
        token value are supplied.
        """
        if not host:
            raise ValidationError(
                "No z/OSMF host was specified. Use --host, ZOSCTL_HOST or a profile."
            )

        auth_type = AuthType.BASIC if user or password else AuthType.NONE
        if token_type and token_value:
            logger.debug("Using token authentication")
            auth_type = AuthType.BEARER if token_type == TokenType.BEARER else AuthType.TOKEN
        else:
            logger.debug("Using basic authentication")
            token_value = None

        return Session(
            hostname=host,
            port=int(port) if port is not None else DEFAULT_PORT,
            protocol=protocol or DEFAULT_PROTOCOL,
            user=user,
            password=password,
            token_type=token_type,
            token_value=token_value,
            reject_unauthorized=True if reject_unauthorized is None else reject_unauthorized,
            base_path=base_path or "",
            auth_type=auth_type,
        )

    @classmethod
    def from_profile(cls, profile: Any) -> Session:
        """Create a session from a profile object exposing connection attributes."""
        logger.debug(f"Creating a z/OSMF session from the profile named {profile.name}")
        return cls.from_args(
            host=profile.host,
            port=profile.port,
            user=profile.user,
            password=profile.password,
            reject_unauthorized=profile.reject_unauthorized,
            base_path=profile.base_path,
            protocol=profile.protocol,
            token_type=profile.token_type,
            token_value=profile.token_value,
        )
