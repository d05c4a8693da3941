"""Error types and input validation helpers.

Every failure surfaced by zosctl derives from ZosError so the command layer
can print a single user-facing message and exit non-zero.

Taxonomy:
- ValidationError: raised locally, before any network call
- RestClientError (see rest_client): transport failures and HTTP rejections
"""

from typing import Any


class ZosError(Exception):
    """Base error carrying a message plus optional diagnostic detail."""

    def __init__(
        self,
        msg: str,
        additional_details: str | None = None,
        cause_errors: Any = None,
        error_code: str | None = None,
    ):
        super().__init__(msg)
        self.msg = msg
        self.additional_details = additional_details
        self.cause_errors = cause_errors
        self.error_code = error_code

    @property
    def message(self) -> str:
        return self.msg

    def __str__(self) -> str:
        return self.msg


class ValidationError(ZosError):
    """Raised when caller input is missing or invalid."""

    pass


def expect_non_blank(value: Any, msg: str) -> None:
    """Raise ValidationError if value is None or an empty/blank string."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        raise ValidationError(msg)

