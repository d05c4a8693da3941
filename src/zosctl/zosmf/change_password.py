"""Change a user's z/OS password through z/OSMF."""

import json
import logging
from typing import Any

from zosctl.errors import ValidationError, expect_non_blank
from zosctl.log_sanitizer import LogSanitizer
from zosctl.rest_client import RestClientError, ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session
from zosctl.zosmf.constants import ZOSMF_CONFIG, ZosmfConfig

logger = logging.getLogger(__name__)

GENERIC_FAILURE_HINT = (
    "\n\nNote: This generic failure message may also indicate:\n"
    "  - The user ID was revoked\n"
    "  - The user ID is not defined in RACF\n"
    "  - The new password does not satisfy the password rules of the installation\n"
    'Ask your z/OSMF administrator to enable "Display error details when login fails" '
    "for a more specific message."
)


def _return_and_reason(cause_errors: Any) -> tuple[Any, Any]:
    if isinstance(cause_errors, str):
        try:
            cause_errors = json.loads(cause_errors)
        except ValueError:
            return None, None
    if isinstance(cause_errors, dict):
        return cause_errors.get("returnCode"), cause_errors.get("reasonCode")
    return None, None


def mask_passwords(error: RestClientError, passwords: list[str], mask: str) -> RestClientError:
    """Replace the plaintext passwords in error with mask, in place.

    The structured payload and all diagnostic text are masked; other fields
    such as the user ID are left as they are.
    """
    if isinstance(error.payload, dict):
        error.payload = {
            key: mask if key in ("oldPwd", "newPwd") else value for key, value in error.payload.items()
        }

    def scrub(text: Any) -> Any:
        if not isinstance(text, str):
            return text
        return LogSanitizer.mask_values(text, passwords, mask)

    error.msg = scrub(error.msg)
    error.additional_details = scrub(error.additional_details)
    error.cause_errors = scrub(error.cause_errors)
    error.args = (error.msg,)
    return error


class ChangePassword:
    @classmethod
    def zosmf_change_password(
        cls,
        session: Session,
        user_id: str,
        old_password: str,
        new_password: str,
        config: ZosmfConfig = ZOSMF_CONFIG,
    ) -> dict[str, Any]:
        """Change the password (or passphrase) of user_id.

        Returns:
            z/OSMF response with returnCode, reasonCode and message

        Raises:
            RestClientError: z/OSMF rejected the change; passwords are masked
                in the error, and a return code 8 / reason code 2 failure
                gets a list of its likely causes appended
        """
        if session is None:
            raise ValidationError("Required session must be defined")
        expect_non_blank(user_id, "User ID must be defined and non-empty")
        expect_non_blank(old_password, "Old password must be defined and non-empty")
        expect_non_blank(new_password, "New password must be defined and non-empty")

        payload = {"userID": user_id, "oldPwd": old_password, "newPwd": new_password}
        logger.info(f"Changing the password of {user_id}")
        try:
            return ZosmfRestClient.put_expect_json(
                session,
                config.authenticate_resource,
                dict(ZosmfHeaders.APPLICATION_JSON),
                payload,
            )
        except RestClientError as e:
            mask_passwords(e, [old_password, new_password], config.password_mask)
            return_code, reason_code = _return_and_reason(e.cause_errors)
            if return_code == 8 and reason_code == 2:
                e.msg += GENERIC_FAILURE_HINT
                e.args = (e.msg,)
            raise
