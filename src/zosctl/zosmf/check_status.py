"""z/OSMF server information and defined systems."""

import logging
from typing import Any

from zosctl.errors import ValidationError
from zosctl.rest_client import ZosmfRestClient
from zosctl.session import Session
from zosctl.zosmf.constants import ZOSMF_CONFIG, ZosmfConfig

logger = logging.getLogger(__name__)


def _expect_session(session: Session | None) -> None:
    if session is None:
        raise ValidationError("Required session must be defined")


class CheckStatus:
    @classmethod
    def get_zosmf_info(cls, session: Session, config: ZosmfConfig = ZOSMF_CONFIG) -> dict[str, Any]:
        """Return the z/OSMF /info document (version, host, installed plug-ins)."""
        _expect_session(session)
        logger.debug(f"Getting z/OSMF information from {session.hostname}")
        return ZosmfRestClient.get_expect_json(session, config.info_resource) or {}


class ListDefinedSystems:
    @classmethod
    def list_systems(cls, session: Session, config: ZosmfConfig = ZOSMF_CONFIG) -> dict[str, Any]:
        """Return the systems defined to z/OSMF ({"numRows": n, "items": [...]})."""
        _expect_session(session)
        return ZosmfRestClient.get_expect_json(session, config.topology_resource) or {
            "numRows": 0,
            "items": [],
        }
