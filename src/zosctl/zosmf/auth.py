"""Obtain and invalidate z/OSMF authentication tokens."""

import logging

from zosctl.errors import ValidationError, ZosError
from zosctl.rest_client import RestClientError, ZosmfRestClient
from zosctl.session import AuthType, Session, TokenType
from zosctl.zosmf.constants import ZOSMF_CONFIG, ZosmfConfig

logger = logging.getLogger(__name__)


class Login:
    @classmethod
    def login(
        cls, session: Session, token_type: str | None = None, config: ZosmfConfig = ZOSMF_CONFIG
    ) -> tuple[str, str]:
        """Authenticate with basic credentials; returns (token_type, token_value).

        Without an explicit token_type the jwtToken cookie is preferred over
        LtpaToken2.

        Raises:
            ZosError: z/OSMF did not set the requested token cookie
        """
        if session is None:
            raise ValidationError("Required session must be defined")
        if not session.user or not session.password:
            raise ValidationError("A user and password are required to log in to z/OSMF")

        response = ZosmfRestClient.post_expect_full_response(
            session.with_basic(), config.authenticate_resource
        )
        wanted = token_type or session.token_type
        candidates = [wanted] if wanted else [TokenType.JWT, TokenType.LTPA2]
        for name in candidates:
            if response.cookies.get(name):
                logger.info(f"Logged in to z/OSMF on {session.hostname} with a {name} token")
                return name, response.cookies[name]
        raise ZosError(
            f"z/OSMF did not return a {' or '.join(candidates)} token.",
            additional_details=f"Cookies returned: {', '.join(response.cookies) or 'none'}",
        )

    @classmethod
    def zosmf_login(
        cls, session: Session, token_type: str | None = None, config: ZosmfConfig = ZOSMF_CONFIG
    ) -> str:
        """Return the token value from the login cookie."""
        return cls.login(session, token_type, config)[1]


class Logout:
    @classmethod
    def zosmf_logout(cls, session: Session, config: ZosmfConfig = ZOSMF_CONFIG) -> None:
        """Invalidate the session's token.

        A token that z/OSMF no longer accepts (HTTP 401) is already logged
        out; that case only logs a warning.
        """
        if session is None:
            raise ValidationError("Required session must be defined")
        if session.auth_type not in (AuthType.TOKEN, AuthType.BEARER) or not session.token_value:
            raise ValidationError("A token type and token value are required to log out of z/OSMF")
        try:
            ZosmfRestClient.delete_expect_string(session, config.authenticate_resource)
        except RestClientError as e:
            if e.status_code == 401:
                logger.warning("The token was already invalid or expired; nothing to log out")
                return
            raise
        logger.info(f"Logged out of z/OSMF on {session.hostname}")
