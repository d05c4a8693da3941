"""Issue MVS console commands."""

import logging
from typing import Any

from zosctl.console.collect_command import CollectCommand, console_resource
from zosctl.console.constants import CONSOLE_CONFIG, ConsoleConfig
from zosctl.console.models import CollectParms, ConsoleResponse, IssueParms
from zosctl.errors import ValidationError, expect_non_blank
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)


def build_console_payload(parms: IssueParms) -> dict[str, str]:
    """z/OSMF request body with only the options the caller set.

    Examples:
        >>> build_console_payload(IssueParms("D IPLINFO"))
        {'cmd': 'D IPLINFO'}
        >>> build_console_payload(IssueParms("D T", solicited_keyword="TIME", async_=True))
        {'cmd': 'D T', 'sol-key': 'TIME', 'async': 'Y'}
    """
    payload = {"cmd": parms.command}
    if parms.solicited_keyword:
        payload["sol-key"] = parms.solicited_keyword
    if parms.sysplex_system:
        payload["system"] = parms.sysplex_system
    if parms.async_:
        payload["async"] = "Y"
    return payload


class IssueCommand:
    """Issue commands on an EMCS console and gather their responses."""

    @classmethod
    def issue_common(
        cls,
        session: Session,
        console_name: str | None,
        payload: dict[str, str],
        config: ConsoleConfig = CONSOLE_CONFIG,
    ) -> dict[str, Any]:
        """Send one command; returns the raw z/OSMF response."""
        if not payload or not str(payload.get("cmd", "")).strip():
            raise ValidationError("Console command must be defined and non-empty")
        if console_name is not None:
            expect_non_blank(console_name, "Console name must be defined and non-empty")
            if len(console_name) > config.max_console_name_length:
                raise ValidationError(
                    f"Console name '{console_name}' exceeds "
                    f"{config.max_console_name_length} characters"
                )
        resource = console_resource(console_name, config)
        logger.info(f"Issuing console command on {console_name or config.default_console}")
        return ZosmfRestClient.put_expect_json(
            session, resource, dict(ZosmfHeaders.APPLICATION_JSON), payload
        ) or {}

    @classmethod
    def issue(
        cls, session: Session, parms: IssueParms, config: ConsoleConfig = CONSOLE_CONFIG
    ) -> ConsoleResponse:
        """Issue a command and, unless async, collect its remaining output.

        Follow-up collection happens when z/OSMF returned a response key and
        a solicited keyword was requested but not yet seen, or no keyword was
        requested and the first response was empty.
        """
        if parms is None:
            raise ValidationError("Console issue parameters must be defined")
        expect_non_blank(parms.command, "Console command must be defined and non-empty")

        response = ConsoleResponse()
        zosmf_response = cls.issue_common(
            session, parms.console_name, build_console_payload(parms), config
        )
        response.populate(zosmf_response, parms.process_responses)

        if parms.async_ or not parms.process_responses or not response.last_response_key:
            return response

        if parms.solicited_keyword:
            should_collect = not response.keyword_detected
        else:
            should_collect = response.last_response_empty
        if should_collect:
            collect_parms = CollectParms(
                command_response_key=response.last_response_key,
                console_name=parms.console_name,
                wait_to_collect=parms.wait_to_collect,
                follow_up_attempts=parms.follow_up_attempts,
            )
            CollectCommand.collect(
                session, collect_parms, response, parms.solicited_keyword, config
            )
        return response

    @classmethod
    def issue_simple(
        cls, session: Session, command: str, config: ConsoleConfig = CONSOLE_CONFIG
    ) -> ConsoleResponse:
        """Issue command on the default console with default collection."""
        return cls.issue(session, IssueParms(command=command), config)
