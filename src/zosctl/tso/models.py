"""TSO/E address space requests and responses."""

from dataclasses import dataclass, field
from typing import Any

TSO_MESSAGE = "TSO MESSAGE"
TSO_PROMPT = "TSO PROMPT"


@dataclass
class StartTsoParms:
    """Address space settings; unset fields use TsoConfig defaults."""

    logon_procedure: str | None = None
    character_set: str | None = None
    code_page: str | None = None
    rows: str | None = None
    columns: str | None = None
    region_size: str | None = None


@dataclass
class TsoResponse:
    """One z/OSMF TSO response.

    Attributes:
        servlet_key: Identifier of the address space
        messages: Text of every TSO MESSAGE in tso_data
        prompt: Whether the response ended with a TSO PROMPT
    """

    servlet_key: str | None = None
    queue_id: str | None = None
    version: str | None = None
    reused: bool = False
    timeout: bool = False
    tso_data: list[dict[str, Any]] = field(default_factory=list)
    msg_data: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TsoResponse":
        data = data or {}
        return cls(
            servlet_key=data.get("servletKey"),
            queue_id=data.get("queueID"),
            version=data.get("ver"),
            reused=bool(data.get("reused", False)),
            timeout=bool(data.get("timeout", False)),
            tso_data=list(data.get("tsoData") or []),
            msg_data=list(data.get("msgData") or []),
        )

    @property
    def messages(self) -> list[str]:
        return [item[TSO_MESSAGE].get("DATA", "") for item in self.tso_data if TSO_MESSAGE in item]

    @property
    def prompt(self) -> bool:
        return any(TSO_PROMPT in item for item in self.tso_data)

    @property
    def error_message(self) -> str | None:
        """Text of the first msgData entry; z/OSMF reports TSO failures there."""
        if not self.msg_data:
            return None
        first = self.msg_data[0]
        return first.get("messageText") or str(first)

    def to_dict(self) -> dict[str, Any]:
        return {
            "servletKey": self.servlet_key,
            "queueID": self.queue_id,
            "ver": self.version,
            "reused": self.reused,
            "timeout": self.timeout,
            "tsoData": self.tso_data,
            "msgData": self.msg_data,
        }


@dataclass
class CollectedResponses:
    """TSO responses gathered up to and including the next prompt."""

    success: bool = False
    zosmf_responses: list[TsoResponse] = field(default_factory=list)
    messages: str = ""

    def add(self, response: TsoResponse) -> None:
        self.zosmf_responses.append(response)
        for message in response.messages:
            self.messages += message + "\n"


@dataclass
class StartStopResponse:
    success: bool
    zosmf_response: TsoResponse
    servlet_key: str | None = None
    messages: str = ""
    failure_response: str | None = None


@dataclass
class IssueResponse:
    """Outcome of start, send and stop for a single TSO command."""

    success: bool = False
    start_response: StartStopResponse | None = None
    start_ready: bool = False
    zosmf_responses: list[TsoResponse] = field(default_factory=list)
    command_response: str = ""
    stop_response: StartStopResponse | None = None
