"""Console command parameters and accumulated responses."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class IssueParms:
    """Parameters for issuing a console command.

    Attributes:
        command: The MVS command text
        console_name: EMCS console to use (default defcn)
        solicited_keyword: Stop collecting once this keyword appears
        sysplex_system: Member of the sysplex to route the command to
        async_: Return immediately; responses are collected separately
        process_responses: Accumulate command output into the response
        wait_to_collect: Seconds before each follow-up collection
        follow_up_attempts: Empty follow-up collections tolerated
    """

    command: str
    console_name: str | None = None
    solicited_keyword: str | None = None
    sysplex_system: str | None = None
    async_: bool = False
    process_responses: bool = True
    wait_to_collect: float | None = None
    follow_up_attempts: int | None = None


@dataclass
class CollectParms:
    command_response_key: str
    console_name: str | None = None
    wait_to_collect: float | None = None
    follow_up_attempts: int | None = None


@dataclass
class ConsoleResponse:
    """Everything observed for one console command.

    command_response concatenates the text of every z/OSMF response, with
    carriage returns turned into newlines.
    """

    success: bool = False
    zosmf_response: list[dict[str, Any]] = field(default_factory=list)
    command_response: str = ""
    last_response_key: str | None = None
    keyword_detected: bool = False
    cmd_response_url: str | None = None
    failure_message: str = ""

    def populate(self, zosmf_response: dict[str, Any], process_responses: bool = True) -> None:
        """Fold one z/OSMF console response into this one."""
        self.zosmf_response.append(zosmf_response)
        self.success = True
        if process_responses:
            text = zosmf_response.get("cmd-response")
            if text:
                self.command_response += text.replace("\r", "\n")
        if zosmf_response.get("cmd-response-key"):
            self.last_response_key = zosmf_response["cmd-response-key"]
        if zosmf_response.get("cmd-response-url"):
            self.cmd_response_url = zosmf_response["cmd-response-url"]
        if str(zosmf_response.get("sol-key-detected", "")).lower() in ("true", "y"):
            self.keyword_detected = True

    @property
    def last_response_empty(self) -> bool:
        if not self.zosmf_response:
            return True
        return not self.zosmf_response[-1].get("cmd-response")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "zosmfResponse": self.zosmf_response,
            "commandResponse": self.command_response,
            "lastResponseKey": self.last_response_key,
            "keywordDetected": self.keyword_detected,
            "cmdResponseUrl": self.cmd_response_url,
            "failureMessage": self.failure_message,
        }
