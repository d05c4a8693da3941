"""Constants for the z/OSMF TSO/E address space REST interface."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TsoConfig:
    """Resource paths and address space defaults.

    The defaults match the logon procedure and terminal geometry z/OSMF
    itself uses for its TSO/E sessions.
    """

    resource: str = "/zosmf/tsoApp"
    res_start_tso: str = "tso"
    res_ping: str = "ping"
    tso_version: str = "0100"
    default_proc: str = "IZUFPROC"
    default_chset: str = "697"
    default_cpage: str = "1047"
    default_rows: str = "204"
    default_cols: str = "160"
    default_rsize: str = "4096"
    max_collect_attempts: int = 100


TSO_CONFIG = TsoConfig()
