"""z/OS console commands through /zosmf/restconsoles."""

from zosctl.console.collect_command import CollectCommand
from zosctl.console.constants import CONSOLE_CONFIG, ConsoleConfig
from zosctl.console.issue_command import IssueCommand
from zosctl.console.models import CollectParms, ConsoleResponse, IssueParms

__all__ = [
    "CONSOLE_CONFIG",
    "CollectCommand",
    "CollectParms",
    "ConsoleConfig",
    "ConsoleResponse",
    "IssueCommand",
    "IssueParms",
]
