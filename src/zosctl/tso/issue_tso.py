"""Run a single TSO command in a short-lived address space."""

import logging

from zosctl.errors import ZosError, expect_non_blank
from zosctl.session import Session
from zosctl.tso.address_space import NO_ACCOUNT_NUMBER, SendTso, StartTso, StopTso
from zosctl.tso.constants import TSO_CONFIG, TsoConfig
from zosctl.tso.models import IssueResponse, StartTsoParms

logger = logging.getLogger(__name__)


class IssueTso:
    @classmethod
    def issue_tso_command(
        cls,
        session: Session,
        account_number: str,
        command: str,
        start_parms: StartTsoParms | None = None,
        config: TsoConfig = TSO_CONFIG,
    ) -> IssueResponse:
        """Start an address space, run command, and stop the address space.

        The address space is stopped even when sending the command fails.

        Raises:
            ZosError: The address space could not be started or the command failed
        """
        expect_non_blank(account_number, NO_ACCOUNT_NUMBER)
        expect_non_blank(command, "Command must be defined and non-empty")

        response = IssueResponse()
        response.start_response = StartTso.start(session, account_number, start_parms, config)
        if not response.start_response.success:
            raise ZosError(
                "TSO address space failed to start.",
                additional_details=response.start_response.failure_response,
            )
        response.start_ready = True
        servlet_key = response.start_response.servlet_key

        try:
            collected = SendTso.send_data_to_tso_collect(session, servlet_key, command, config)
            response.zosmf_responses = collected.zosmf_responses
            response.command_response = collected.messages
        finally:
            response.stop_response = StopTso.stop(session, servlet_key, config)

        response.success = collected.success and response.stop_response.success
        return response
