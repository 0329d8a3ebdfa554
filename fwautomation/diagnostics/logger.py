"""Logging setup and the firewall group operation record."""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

LOG_FILE_ENV = "FWGROUPS_LOG_FILE"


class OperationLog:
    """Records appliance replies for one resource operation.

    Each record goes to the ``fwautomation.operations`` logger and, when a
    log file is set, is appended to it as one JSON line. A log file that
    cannot be written never fails the operation.
    """

    def __init__(
        self,
        resource_id: Optional[str] = None,
        log_file: Optional[str] = None,
    ):
        self.resource_id = resource_id
        self.log_file = log_file or os.environ.get(LOG_FILE_ENV) or None
        self._logger = logging.getLogger("fwautomation.operations")

    def info(self, message: str, **context) -> None:
        self._record(logging.INFO, message, context)

    def error(self, message: str, **context) -> None:
        self._record(logging.ERROR, message, context)

    def _record(self, level: int, message: str, context: dict) -> None:
        if self.resource_id:
            context = {"resource_id": self.resource_id, **context}

        self._logger.log(level, f"{message} | {context}" if context else message)

        if not self.log_file:
            return
        line = json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": logging.getLevelName(level).lower(),
                "message": message,
                "context": context,
            },
            default=str,
        )
        try:
            with open(self.log_file, "a") as f:
                f.write(line + "\n")
        except OSError as e:
            self._logger.warning(f"Could not write operation log {self.log_file}: {e}")


def setup_logging(
    level: str = "INFO",
    debug_ssh: bool = False,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        debug_ssh: Enable verbose asyncssh logging
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    logging.getLogger("asyncssh").setLevel(
        logging.DEBUG if debug_ssh else logging.WARNING
    )
