"""REST client for z/OSMF.

Every wrapper in zosctl talks to z/OSMF through ZosmfRestClient. The client:
- adds the X-CSRF-ZOSMF-HEADER to every request
- authenticates with basic credentials, a token cookie or a bearer token
- retries GET requests on transient transport failures (never writes)
- turns transport failures and HTTP rejections into RestClientError
"""

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import IO, Any

import requests

from zosctl.errors import ZosError
from zosctl.log_sanitizer import LogSanitizer
from zosctl.retry_config import get_retry_config
from zosctl.retry_handler import retry_with_exponential_backoff
from zosctl.session import AuthType, Session, TokenType

logger = logging.getLogger(__name__)

# (connect, read) in seconds; z/OSMF itself bounds long operations with
# X-IBM-Response-Timeout
REQUEST_TIMEOUT = (30.0, 600.0)
STREAM_CHUNK_SIZE = 64 * 1024


class ZosmfHeaders:
    """Header fragments understood by z/OSMF."""

    X_CSRF_ZOSMF_HEADER = {"X-CSRF-ZOSMF-HEADER": "true"}
    ACCEPT_ENCODING = {"Accept-Encoding": "gzip"}
    APPLICATION_JSON = {"Content-Type": "application/json"}
    TEXT_PLAIN = {"Content-Type": "text/plain"}
    OCTET_STREAM = {"Content-Type": "application/octet-stream"}

    X_IBM_TEXT = {"X-IBM-Data-Type": "text"}
    X_IBM_BINARY = {"X-IBM-Data-Type": "binary"}
    X_IBM_RECORD = {"X-IBM-Data-Type": "record"}
    X_IBM_TEXT_ENCODING = ";fileEncoding="

    X_IBM_MAX_ITEMS = "X-IBM-Max-Items"
    X_IBM_ATTRIBUTES_BASE = {"X-IBM-Attributes": "base"}
    X_IBM_RESPONSE_TIMEOUT = "X-IBM-Response-Timeout"
    X_IBM_RETURN_ETAG = {"X-IBM-Return-Etag": "true"}
    X_IBM_RECORD_RANGE = "X-IBM-Record-Range"
    X_IBM_RECURSIVE = {"X-IBM-Option": "recursive"}
    X_IBM_MIGRATED_RECALL_WAIT = {"X-IBM-Migrated-Recall": "wait"}
    X_IBM_MIGRATED_RECALL_NO_WAIT = {"X-IBM-Migrated-Recall": "nowait"}
    X_IBM_MIGRATED_RECALL_ERROR = {"X-IBM-Migrated-Recall": "error"}

    X_IBM_INTRDR_MODE_TEXT = {"X-IBM-Intrdr-Mode": "TEXT"}
    X_IBM_INTRDR_LRECL = "X-IBM-Intrdr-Lrecl"
    X_IBM_INTRDR_RECFM = "X-IBM-Intrdr-Recfm"
    X_IBM_JCL_SYMBOL_PREFIX = "X-IBM-JCL-Symbol-"
    X_IBM_JOB_MODIFY_VERSION = "X-IBM-Job-Modify-Version"

    IF_MATCH = "If-Match"


class RestClientError(ZosError):
    """A request to z/OSMF failed.

    source is "client" when no HTTP response was received (connection,
    TLS or timeout failure) and "http" when z/OSMF answered with a status
    of 400 or above.
    """

    def __init__(
        self,
        msg: str,
        additional_details: str | None = None,
        cause_errors: Any = None,
        status_code: int | None = None,
        resource: str | None = None,
        method: str | None = None,
        payload: Any = None,
        source: str = "http",
    ):
        super().__init__(
            msg,
            additional_details=additional_details,
            cause_errors=cause_errors,
            error_code=str(status_code) if status_code is not None else None,
        )
        self.status_code = status_code
        self.resource = resource
        self.method = method
        self.payload = payload
        self.source = source


@dataclass
class RestResponse:
    """Full response from a request, for callers that need headers or cookies."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""
    cookies: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        if not self.content:
            return None
        return json.loads(self.content)


class ZosmfRestClient:
    """Issue requests against z/OSMF for a Session.

    Methods are classmethods taking the session explicitly; the client keeps
    no state between calls.
    """

    # -- GET -------------------------------------------------------------

    @classmethod
    def get_expect_json(cls, session: Session, resource: str, headers: dict | None = None) -> Any:
        return _parse_json(cls.request(session, "GET", resource, headers))

    @classmethod
    def get_expect_string(cls, session: Session, resource: str, headers: dict | None = None) -> str:
        return cls.request(session, "GET", resource, headers).text

    @classmethod
    def get_expect_buffer(cls, session: Session, resource: str, headers: dict | None = None) -> bytes:
        return cls.request(session, "GET", resource, headers).content

    @classmethod
    def get_streamed(
        cls,
        session: Session,
        resource: str,
        headers: dict | None,
        response_stream: IO[bytes],
        normalize_newlines: bool = False,
    ) -> RestResponse:
        """Stream a response body into response_stream.

        Args:
            normalize_newlines: Write \\r\\n sequences as \\n (text transfers)
        """
        response = cls.request(session, "GET", resource, headers, stream=True)
        try:
            for chunk in _iter_chunks(response, normalize_newlines):
                response_stream.write(chunk)
        finally:
            response.close()
        return RestResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            cookies=dict(response.cookies),
        )

    # -- PUT -------------------------------------------------------------

    @classmethod
    def put_expect_json(
        cls, session: Session, resource: str, headers: dict | None = None, payload: Any = None
    ) -> Any:
        return _parse_json(cls.request(session, "PUT", resource, headers, payload))

    @classmethod
    def put_expect_string(
        cls, session: Session, resource: str, headers: dict | None = None, payload: Any = None
    ) -> str:
        return cls.request(session, "PUT", resource, headers, payload).text

    @classmethod
    def put_expect_full_response(
        cls, session: Session, resource: str, headers: dict | None = None, payload: Any = None
    ) -> RestResponse:
        return _to_rest_response(cls.request(session, "PUT", resource, headers, payload))

    # -- POST ------------------------------------------------------------

    @classmethod
    def post_expect_json(
        cls, session: Session, resource: str, headers: dict | None = None, payload: Any = None
    ) -> Any:
        return _parse_json(cls.request(session, "POST", resource, headers, payload))

    @classmethod
    def post_expect_string(
        cls, session: Session, resource: str, headers: dict | None = None, payload: Any = None
    ) -> str:
        return cls.request(session, "POST", resource, headers, payload).text

    @classmethod
    def post_expect_full_response(
        cls, session: Session, resource: str, headers: dict | None = None, payload: Any = None
    ) -> RestResponse:
        return _to_rest_response(cls.request(session, "POST", resource, headers, payload))

    # -- DELETE ----------------------------------------------------------

    @classmethod
    def delete_expect_string(cls, session: Session, resource: str, headers: dict | None = None) -> str:
        return cls.request(session, "DELETE", resource, headers).text

    @classmethod
    def delete_expect_json(cls, session: Session, resource: str, headers: dict | None = None) -> Any:
        return _parse_json(cls.request(session, "DELETE", resource, headers))

    # -- core ------------------------------------------------------------

    @classmethod
    def build_headers(cls, session: Session, headers: dict | None = None) -> dict[str, str]:
        """Merge caller headers with the CSRF header and auth material."""
        merged: dict[str, str] = {}
        if headers:
            merged.update({k: str(v) for k, v in headers.items()})
        merged.update(ZosmfHeaders.X_CSRF_ZOSMF_HEADER)

        if session.auth_type == AuthType.BEARER and session.token_value:
            merged["Authorization"] = f"Bearer {session.token_value}"
        elif session.auth_type == AuthType.TOKEN and session.token_value:
            merged["Cookie"] = f"{session.token_type}={session.token_value}"
        return merged

    @classmethod
    def request(
        cls,
        session: Session,
        method: str,
        resource: str,
        headers: dict | None = None,
        payload: Any = None,
        stream: bool = False,
    ) -> requests.Response:
        """Send one request and return the raw response.

        Raises:
            RestClientError: No response was received, or z/OSMF rejected the request
        """
        url = session.base_url + resource
        request_headers = cls.build_headers(session, headers)
        data, json_body = _encode_payload(payload)
        auth = None
        if session.auth_type == AuthType.BASIC or (
            session.auth_type == AuthType.NONE and session.user and session.password
        ):
            auth = (session.user or "", session.password or "")

        logger.debug(f"{method} {resource}")

        def _send_request() -> requests.Response:
            return requests.request(
                method,
                url,
                headers=request_headers,
                data=data,
                json=json_body,
                auth=auth,
                verify=session.reject_unauthorized,
                timeout=REQUEST_TIMEOUT,
                stream=stream,
            )

        send = _send_request
        if method == "GET":
            config = get_retry_config()
            send = retry_with_exponential_backoff(
                max_attempts=config.max_attempts,
                initial_delay=config.initial_delay,
                max_delay=config.max_delay,
                jitter=config.jitter_enabled,
            )(_send_request)

        try:
            response = send()
        except requests.exceptions.RequestException as e:
            raise cls._client_error(session, method, resource, request_headers, payload, e) from e

        if response.status_code >= 400:
            raise cls._http_error(session, method, resource, request_headers, payload, response)
        return response

    @classmethod
    def _client_error(
        cls,
        session: Session,
        method: str,
        resource: str,
        headers: dict,
        payload: Any,
        error: Exception,
    ) -> RestClientError:
        if isinstance(error, requests.exceptions.SSLError):
            msg = (
                "Failed to establish a secure connection. The server certificate could not be "
                "verified; use --reject-unauthorized false to accept self-signed certificates."
            )
            details = "HTTP(S) client encountered a TLS error."
        elif isinstance(error, requests.exceptions.Timeout):
            msg = "HTTP request timed out after connecting."
            details = "HTTP(S) client encountered an error. Request timed out."
        elif isinstance(error, requests.exceptions.ConnectionError):
            msg = "Failed to send an HTTP request."
            details = (
                "HTTP(S) client encountered an error. Request could not be initiated to host.\n"
                "Review connection details (host, port) and ensure correctness."
            )
        else:
            msg = "Failed to send an HTTP request."
            details = "HTTP(S) client encountered an error."

        logger.debug(f"{method} {resource} failed: {LogSanitizer.sanitize(str(error))}")
        return RestClientError(
            msg,
            additional_details=details + _request_details(session, method, resource, headers, payload),
            cause_errors=LogSanitizer.sanitize(str(error)),
            resource=resource,
            method=method,
            payload=payload,
            source="client",
        )

    @classmethod
    def _http_error(
        cls,
        session: Session,
        method: str,
        resource: str,
        headers: dict,
        payload: Any,
        response: requests.Response,
    ) -> RestClientError:
        status = response.status_code
        try:
            reason = HTTPStatus(status).phrase
        except ValueError:
            reason = response.reason or ""

        msg = f"Rest API failure with HTTP(S) status {status}"
        cause_errors: Any = response.text
        details = f"Received HTTP(S) error {status} = {reason}." + _request_details(
            session, method, resource, headers, payload
        )

        # z/OSMF sometimes includes a Java stack in its JSON errors
        try:
            parsed = json.loads(cause_errors) if cause_errors else None
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            parsed.pop("stack", None)
            cause_errors = json.dumps(parsed)
            msg += "\n" + json.dumps(parsed, indent=2)
        elif cause_errors:
            msg += "\n" + cause_errors

        if status == HTTPStatus.UNAUTHORIZED:
            msg = "This operation requires authentication.\n\n" + msg
            if session.auth_type == AuthType.BASIC:
                details = "Username or password are not valid or expired.\n\n" + details
            elif session.token_type == TokenType.APIML and not session.base_path:
                details = (
                    "The API mediation layer token was supplied without a base path. "
                    "Specify --base-path for the z/OSMF service.\n\n" + details
                )
            elif session.auth_type in (AuthType.TOKEN, AuthType.BEARER):
                details = (
                    "Token is not valid or expired. To obtain a new token, use "
                    "`zosctl auth login`.\n\n" + details
                )

        logger.debug(f"{method} {resource} rejected with HTTP {status}")
        return RestClientError(
            msg,
            additional_details=details,
            cause_errors=cause_errors,
            status_code=status,
            resource=resource,
            method=method,
            payload=payload,
            source="http",
        )


def _encode_payload(payload: Any) -> tuple[Any, Any]:
    """Return (data, json) arguments for requests."""
    if payload is None:
        return None, None
    if isinstance(payload, (bytes, bytearray, str)) or hasattr(payload, "read"):
        return payload, None
    return None, payload


def _parse_json(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise ZosError(
            "z/OSMF returned a response that is not valid JSON.",
            additional_details=response.text[:500],
        ) from e


def _to_rest_response(response: requests.Response) -> RestResponse:
    return RestResponse(
        status_code=response.status_code,
        headers=dict(response.headers),
        content=response.content,
        cookies=dict(response.cookies),
    )


def _iter_chunks(response: requests.Response, normalize_newlines: bool) -> Iterator[bytes]:
    carry = b""
    for chunk in response.iter_content(chunk_size=STREAM_CHUNK_SIZE):
        if not chunk:
            continue
        if not normalize_newlines:
            yield chunk
            continue
        chunk = carry + chunk
        # Hold a trailing \r back in case its \n arrives in the next chunk
        if chunk.endswith(b"\r"):
            chunk, carry = chunk[:-1], b"\r"
        else:
            carry = b""
        yield chunk.replace(b"\r\n", b"\n")
    if carry:
        yield carry


def _request_details(
    session: Session, method: str, resource: str, headers: dict, payload: Any
) -> str:
    if isinstance(payload, (bytes, bytearray)) or hasattr(payload, "read"):
        payload_details = "<binary>"
    elif isinstance(payload, (dict, list)):
        payload_details = LogSanitizer.sanitize(json.dumps(payload))
    elif payload is None:
        payload_details = ""
    else:
        payload_details = LogSanitizer.sanitize(str(payload))[:200]

    return (
        "\n"
        f"\nProtocol:          {session.protocol}"
        f"\nHost:              {session.hostname}"
        f"\nPort:              {session.port}"
        f"\nBase Path:         {session.base_path}"
        f"\nResource:          {resource}"
        f"\nRequest:           {method}"
        f"\nHeaders:           {json.dumps(LogSanitizer.sanitize_headers(headers))}"
        f"\nPayload:           {payload_details}"
        f"\nAuth type:         {session.auth_type.value}"
        f"\nAllow Unauth Cert: {not session.reject_unauthorized}"
    )
