"""Log sanitization for keeping credentials out of logs and error text.

Covers the secrets a z/OSMF client handles:
- Passwords (including oldPwd/newPwd in change-password payloads)
- Token values and auth cookies (LtpaToken2, jwtToken, apimlAuthenticationToken)
- Authorization headers (Basic and Bearer)

Pattern-based; when in doubt, mask it.
"""

import re
from collections.abc import Iterable
from re import Pattern
from typing import Any


class LogSanitizer:
    """Sanitize sensitive data from logs and error messages.

    All methods are classmethods and can be called without instantiation.
    """

    REDACTED = "[REDACTED]"
    MASKED = "****"

    # Order matters: more specific patterns come first
    SECRET_PATTERNS: dict[str, Pattern] = {
        "authorization_basic": re.compile(r"(Authorization['\"]?\s*[:=]\s*['\"]?Basic\s+)([^\s'\"]+)", re.IGNORECASE),
        "authorization_bearer": re.compile(r"(Authorization['\"]?\s*[:=]\s*['\"]?Bearer\s+)([^\s'\"]+)", re.IGNORECASE),
        "auth_cookie": re.compile(
            r"((?:LtpaToken2|jwtToken|apimlAuthenticationToken)=)([^\s;'\",]+)",
        ),
        "change_password": re.compile(
            r"([\"']?(?:oldPwd|newPwd)[\"']?\s*[:=]\s*[\"']?)([^\s\"'&,\)\}]+)",
            re.IGNORECASE,
        ),
        "password": re.compile(
            r"((?:password|passwd|pwd)[\"']?\s*[:=]\s*[\"']?)([^\s\"'&,\)\}]+)",
            re.IGNORECASE,
        ),
        "token_value": re.compile(
            r"(token[_-]?value[\"']?\s*[:=]\s*[\"']?)([^\s\"'&,\)\}]+)",
            re.IGNORECASE,
        ),
        "token_assignment": re.compile(
            r"([^a-zA-Z]token[\"']?\s*[:=]\s*[\"']?)([^\s\"'&,\)\}]+)", re.IGNORECASE
        ),
    }

    SENSITIVE_KEYS = (
        "password",
        "passwd",
        "oldpwd",
        "newpwd",
        "token_value",
        "tokenvalue",
        "authorization",
        "cookie",
        "secret",
    )

    @classmethod
    def sanitize(cls, message: str) -> str:
        """Sanitize message by redacting sensitive patterns.

        Examples:
            >>> LogSanitizer.sanitize("password=abc123")
            'password=[REDACTED]'
            >>> LogSanitizer.sanitize("Cookie: LtpaToken2=abc123")
            'Cookie: LtpaToken2=[REDACTED]'
        """
        if not isinstance(message, str):
            message = str(message)

        result = message
        for pattern in cls.SECRET_PATTERNS.values():
            result = pattern.sub(r"\1" + cls.REDACTED, result)
        return result

    @classmethod
    def mask_values(cls, text: str, secrets: Iterable[str | None], mask: str = MASKED) -> str:
        """Replace every occurrence of each known secret value with mask.

        Used where the secret is known verbatim but may appear in free text,
        for example a password echoed back inside a server error.
        """
        if text is None:
            return text
        result = str(text)
        # Longest first so a secret containing another is masked whole
        for secret in sorted((s for s in secrets if s), key=len, reverse=True):
            result = result.replace(secret, mask)
        return result

    @classmethod
    def sanitize_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Sanitize dictionary values recursively.

        Values under sensitive keys are replaced with [REDACTED]; other string
        values are passed through sanitize().
        """
        result: dict[str, Any] = {}
        for key, value in data.items():
            key_lower = str(key).lower().replace("-", "_")
            if any(word in key_lower for word in cls.SENSITIVE_KEYS):
                result[key] = cls.REDACTED
            elif isinstance(value, dict):
                result[key] = cls.sanitize_dict(value)
            elif isinstance(value, str):
                result[key] = cls.sanitize(value)
            elif isinstance(value, (list, tuple)):
                result[key] = type(value)(
                    cls.sanitize_dict(item)
                    if isinstance(item, dict)
                    else cls.sanitize(item)
                    if isinstance(item, str)
                    else item
                    for item in value
                )
            else:
                result[key] = value
        return result

    @classmethod
    def sanitize_headers(cls, headers: dict[str, str] | None) -> dict[str, str]:
        """Return a copy of request headers safe to log."""
        if not headers:
            return {}
        return cls.sanitize_dict(dict(headers))


def sanitize_log_message(message: str) -> str:
    """Convenience function for log sanitization."""
    return LogSanitizer.sanitize(message)
