"""Constants for the z/OSMF jobs REST interface."""

import logging
import os
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobsConfig:
    """Resource paths and defaults for job operations.

    Attributes:
        watch_delay: Seconds between status polls while waiting for a job
        max_attempts: Polls before giving up; None polls until the status is reached
    """

    resource: str = "/zosmf/restjobs/jobs"
    res_spool_files: str = "/files"
    res_jcl_content: str = "/JCL"
    res_spool_content: str = "/records"
    default_prefix: str = "*"
    default_max_jobs: int = 1000
    watch_delay: float = 3.0
    max_attempts: int | None = None
    default_output_dir: str = "./output"
    default_output_extension: str = ".txt"
    max_symbol_length: int = 8
    intrdr_lrecl: str = "80"
    intrdr_recfm: str = "F"
    modify_version: str = "2.0"

    @classmethod
    def from_environment(cls) -> "JobsConfig":
        """Defaults overridden by ZOSCTL_WATCH_DELAY and ZOSCTL_WATCH_ATTEMPTS.

        Invalid values are logged and ignored.
        """
        config = cls()
        delay = os.getenv("ZOSCTL_WATCH_DELAY")
        if delay:
            try:
                value = float(delay)
                if value < 0:
                    raise ValueError(delay)
                config = replace(config, watch_delay=value)
            except ValueError:
                logger.warning(f"Ignoring invalid ZOSCTL_WATCH_DELAY value: {delay}")
        attempts = os.getenv("ZOSCTL_WATCH_ATTEMPTS")
        if attempts:
            try:
                value = int(attempts)
                if value < 0:
                    raise ValueError(attempts)
                config = replace(config, max_attempts=value or None)
            except ValueError:
                logger.warning(f"Ignoring invalid ZOSCTL_WATCH_ATTEMPTS value: {attempts}")
        return config


JOBS_CONFIG = JobsConfig()
