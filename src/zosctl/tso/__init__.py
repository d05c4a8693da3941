"""TSO/E address spaces through /zosmf/tsoApp."""

from zosctl.tso.address_space import PingTso, SendTso, StartTso, StopTso
from zosctl.tso.constants import TSO_CONFIG, TsoConfig
from zosctl.tso.issue_tso import IssueTso
from zosctl.tso.models import (
    CollectedResponses,
    IssueResponse,
    StartStopResponse,
    StartTsoParms,
    TsoResponse,
)

__all__ = [
    "TSO_CONFIG",
    "CollectedResponses",
    "IssueResponse",
    "IssueTso",
    "PingTso",
    "SendTso",
    "StartStopResponse",
    "StartTso",
    "StartTsoParms",
    "StopTso",
    "TsoConfig",
    "TsoResponse",
]
