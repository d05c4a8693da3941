"""Collect solicited console messages for an earlier command."""

import logging
import time
from typing import Any

from zosctl.console.constants import CONSOLE_CONFIG, ConsoleConfig
from zosctl.console.models import CollectParms, ConsoleResponse
from zosctl.errors import ValidationError, expect_non_blank
from zosctl.files.utils import encode
from zosctl.rest_client import ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)


def console_resource(console_name: str | None, config: ConsoleConfig = CONSOLE_CONFIG) -> str:
    return f"{config.resource}{config.res_consoles}/{encode(console_name or config.default_console)}"


class CollectCommand:
    @classmethod
    def get_resource(
        cls, console_name: str | None, command_response_key: str, config: ConsoleConfig = CONSOLE_CONFIG
    ) -> str:
        return f"{console_resource(console_name, config)}{config.res_solmsgs}/{encode(command_response_key)}"

    @classmethod
    def collect_common(
        cls,
        session: Session,
        console_name: str | None,
        command_response_key: str,
        config: ConsoleConfig = CONSOLE_CONFIG,
    ) -> dict[str, Any]:
        """Fetch the pending solicited messages for a response key."""
        expect_non_blank(command_response_key, "Command response key must be defined and non-empty")
        resource = cls.get_resource(console_name, command_response_key, config)
        logger.debug(f"Collecting console messages: {resource}")
        return ZosmfRestClient.get_expect_json(session, resource) or {}

    @classmethod
    def collect(
        cls,
        session: Session,
        parms: CollectParms,
        response: ConsoleResponse | None = None,
        solicited_keyword: str | None = None,
        config: ConsoleConfig = CONSOLE_CONFIG,
    ) -> ConsoleResponse:
        """Collect follow-up messages into response.

        Collection continues while messages keep arriving; each empty
        collection uses up one follow-up attempt. A detected solicited
        keyword ends collection immediately.
        """
        if parms is None:
            raise ValidationError("Console collect parameters must be defined")
        response = response or ConsoleResponse()
        attempts_left = config.follow_up_attempts if parms.follow_up_attempts is None else parms.follow_up_attempts
        wait = config.wait_to_collect if parms.wait_to_collect is None else parms.wait_to_collect
        if attempts_left < 0 or wait < 0:
            raise ValidationError("Follow-up attempts and wait to collect must not be negative")

        while attempts_left > 0:
            if wait:
                time.sleep(wait)
            collected = cls.collect_common(
                session, parms.console_name, parms.command_response_key, config
            )
            response.populate(collected)
            if solicited_keyword and solicited_keyword in (collected.get("cmd-response") or ""):
                response.keyword_detected = True
            if response.keyword_detected:
                break
            if response.last_response_empty:
                attempts_left -= 1
        return response
