"""Invoke IDCAMS access method services through z/OSMF."""

import logging
import re
from pathlib import Path

from zosctl.errors import ValidationError
from zosctl.files import messages
from zosctl.files.constants import FILES_CONFIG, FilesConfig
from zosctl.files.response import ZosFilesResponse
from zosctl.files.utils import response_timeout_header
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)


def _error_context(lines: list[str], index: int, context: int = 2) -> str:
    start = max(0, index - context)
    end = min(len(lines), index + context + 1)
    marked = []
    for i in range(start, end):
        prefix = ">" if i == index else " "
        marked.append(f"{prefix} {i + 1:4d} | {lines[i]}")
    return "\n".join(marked)


class Invoke:
    """Submit IDCAMS statements to the z/OSMF AMS endpoint."""

    @classmethod
    def ams_statements(
        cls,
        session: Session,
        statements: list[str],
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Run IDCAMS statements.

        Statements are upper-cased and split on line breaks; each resulting
        line must fit in the IDCAMS input record.

        Raises:
            ValidationError: No statements, or a line is too long
        """
        if not statements:
            raise ValidationError(messages.MISSING_STATEMENTS)

        lines: list[str] = []
        for statement in statements:
            lines.extend(re.split(r"\r?\n", statement.upper()))

        for index, line in enumerate(lines):
            if len(line) > config.max_ams_line:
                raise ValidationError(
                    messages.LINE_TOO_LONG.format(
                        line=index + 1, max=config.max_ams_line, text=_error_context(lines, index)
                    )
                )

        headers = {**ZosmfHeaders.APPLICATION_JSON, **response_timeout_header(response_timeout)}
        resource = config.resource + config.res_ams
        logger.debug(f"Invoking {len(lines)} IDCAMS statement line(s)")
        response = ZosmfRestClient.put_expect_json(session, resource, headers, {"input": lines})

        return ZosFilesResponse(
            success=True,
            command_response=messages.AMS_COMMAND_EXECUTED,
            api_response=response,
        )

    @classmethod
    def ams_file(
        cls,
        session: Session,
        file_path: str | Path,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Run the IDCAMS statements held in a local file."""
        path = Path(file_path)
        if not path.is_file():
            raise ValidationError(messages.MISSING_INPUT_FILE, additional_details=str(path))
        return cls.ams_statements(
            session, path.read_text().splitlines(), response_timeout, config=config
        )
