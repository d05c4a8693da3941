"""Start, converse with, ping and stop TSO/E address spaces."""

import logging

from zosctl.errors import ZosError, expect_non_blank
from zosctl.files.utils import encode
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session
from zosctl.tso.constants import TSO_CONFIG, TsoConfig
from zosctl.tso.models import CollectedResponses, StartStopResponse, StartTsoParms, TsoResponse

logger = logging.getLogger(__name__)

NO_ACCOUNT_NUMBER = "Account number must be defined and non-empty"
NO_SERVLET_KEY = "Servlet key must be defined and non-empty"


def tso_resource(config: TsoConfig = TSO_CONFIG) -> str:
    return f"{config.resource}/{config.res_start_tso}"


def _raise_on_msg_data(response: TsoResponse, action: str) -> None:
    if response.error_message:
        raise ZosError(f"Failed to {action} the TSO address space: {response.error_message}")


class SendTso:
    @classmethod
    def send_data_to_tso_common(
        cls, session: Session, servlet_key: str, data: str, config: TsoConfig = TSO_CONFIG
    ) -> TsoResponse:
        """PUT one line of input to the address space."""
        expect_non_blank(servlet_key, NO_SERVLET_KEY)
        if data is None:
            raise ZosError("TSO data to send must be defined")
        payload = {"TSO RESPONSE": {"VERSION": config.tso_version, "DATA": data}}
        resource = f"{tso_resource(config)}/{encode(servlet_key)}"
        logger.debug(f"Sending data to TSO address space {servlet_key}")
        return TsoResponse.from_dict(
            ZosmfRestClient.put_expect_json(
                session, resource, dict(ZosmfHeaders.APPLICATION_JSON), payload
            )
        )

    @classmethod
    def get_data_from_tso(
        cls, session: Session, servlet_key: str, config: TsoConfig = TSO_CONFIG
    ) -> TsoResponse:
        expect_non_blank(servlet_key, NO_SERVLET_KEY)
        resource = f"{tso_resource(config)}/{encode(servlet_key)}"
        return TsoResponse.from_dict(ZosmfRestClient.get_expect_json(session, resource))

    @classmethod
    def get_all_responses(
        cls,
        session: Session,
        first: TsoResponse,
        config: TsoConfig = TSO_CONFIG,
    ) -> CollectedResponses:
        """Read responses until a TSO PROMPT arrives.

        Raises:
            ZosError: No prompt arrived within config.max_collect_attempts reads
        """
        collected = CollectedResponses()
        collected.add(first)
        _raise_on_msg_data(first, "read from")
        current = first
        attempts = 0
        while not current.prompt:
            attempts += 1
            if attempts > config.max_collect_attempts:
                raise ZosError(
                    f"No TSO prompt received after {config.max_collect_attempts} reads "
                    f"from address space {first.servlet_key}"
                )
            current = cls.get_data_from_tso(session, first.servlet_key, config)
            _raise_on_msg_data(current, "read from")
            collected.add(current)
        collected.success = True
        return collected

    @classmethod
    def send_data_to_tso_collect(
        cls, session: Session, servlet_key: str, data: str, config: TsoConfig = TSO_CONFIG
    ) -> CollectedResponses:
        """Send data and return everything up to the next prompt."""
        response = cls.send_data_to_tso_common(session, servlet_key, data, config)
        if not response.servlet_key:
            response.servlet_key = servlet_key
        return cls.get_all_responses(session, response, config)


class StartTso:
    @classmethod
    def start_common(
        cls,
        session: Session,
        account_number: str,
        parms: StartTsoParms | None = None,
        config: TsoConfig = TSO_CONFIG,
    ) -> TsoResponse:
        """POST a new address space; returns the raw first response."""
        expect_non_blank(account_number, NO_ACCOUNT_NUMBER)
        parms = parms or StartTsoParms()
        query = (
            f"acct={encode(account_number)}"
            f"&proc={encode(parms.logon_procedure or config.default_proc)}"
            f"&chset={encode(parms.character_set or config.default_chset)}"
            f"&cpage={encode(parms.code_page or config.default_cpage)}"
            f"&rows={encode(parms.rows or config.default_rows)}"
            f"&cols={encode(parms.columns or config.default_cols)}"
            f"&rsize={encode(parms.region_size or config.default_rsize)}"
        )
        logger.info("Starting a TSO address space")
        return TsoResponse.from_dict(
            ZosmfRestClient.post_expect_json(session, f"{tso_resource(config)}?{query}")
        )

    @classmethod
    def start(
        cls,
        session: Session,
        account_number: str,
        parms: StartTsoParms | None = None,
        config: TsoConfig = TSO_CONFIG,
    ) -> StartStopResponse:
        """Start an address space and wait for its first READY prompt."""
        response = cls.start_common(session, account_number, parms, config)
        if not response.servlet_key:
            return StartStopResponse(
                success=False,
                zosmf_response=response,
                failure_response=response.error_message or "No servlet key was returned",
            )
        collected = SendTso.get_all_responses(session, response, config)
        logger.debug(f"TSO address space {response.servlet_key} started")
        return StartStopResponse(
            success=collected.success,
            zosmf_response=response,
            servlet_key=response.servlet_key,
            messages=collected.messages,
        )


class PingTso:
    @classmethod
    def ping(cls, session: Session, servlet_key: str, config: TsoConfig = TSO_CONFIG) -> TsoResponse:
        """Keep an address space alive; raises ZosError when it is gone."""
        expect_non_blank(servlet_key, NO_SERVLET_KEY)
        resource = f"{tso_resource(config)}/{config.res_ping}/{encode(servlet_key)}"
        response = TsoResponse.from_dict(ZosmfRestClient.put_expect_json(session, resource))
        _raise_on_msg_data(response, "ping")
        return response


class StopTso:
    @classmethod
    def stop(cls, session: Session, servlet_key: str, config: TsoConfig = TSO_CONFIG) -> StartStopResponse:
        expect_non_blank(servlet_key, NO_SERVLET_KEY)
        resource = f"{tso_resource(config)}/{encode(servlet_key)}"
        logger.info(f"Stopping TSO address space {servlet_key}")
        response = TsoResponse.from_dict(ZosmfRestClient.delete_expect_json(session, resource))
        _raise_on_msg_data(response, "stop")
        return StartStopResponse(
            success=True,
            zosmf_response=response,
            servlet_key=response.servlet_key or servlet_key,
        )
