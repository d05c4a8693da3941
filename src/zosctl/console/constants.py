"""Constants for the z/OSMF console REST interface."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ConsoleConfig:
    """Resource paths and collection defaults for console commands.

    Attributes:
        wait_to_collect: Seconds to wait before each follow-up collection
        follow_up_attempts: Empty follow-up responses tolerated before giving up
    """

    resource: str = "/zosmf/restconsoles"
    res_consoles: str = "/consoles"
    res_solmsgs: str = "/solmsgs"
    default_console: str = "defcn"
    max_console_name_length: int = 8
    wait_to_collect: float = 3.0
    follow_up_attempts: int = 1


CONSOLE_CONFIG = ConsoleConfig()
