# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements logging helpers for SimplexOpt runs.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Optional

import logging
import pathlib

TRUNCATION_MARKER: str = "... [TRUNCATED]"


class SizeLimitedFormatter(logging.Formatter):
    """Logging formatter that enforces a maximum message size.

    Simplex and point dumps grow with the dimension of the problem, so long
    messages are cut off and marked with a truncation indicator. The limit
    applies to the message content only, before the timestamp and level are
    added.

    Attributes:
        max_msg_sz: Maximum allowed length for log message content in characters.
    """

    def __init__(
        self, fmt: Optional[str] = None, datefmt: Optional[str] = None, max_msg_sz: int = 256
    ) -> None:
        """Initializes the size-limited formatter.

        Args:
            fmt: Format string for log messages. If None, uses the default format.
            datefmt: Format string for the date/time portion of log messages.
            max_msg_sz: Maximum allowed length for the message content in
                characters, truncation marker included.

        Raises:
            ValueError: If max_msg_sz is too small to hold the truncation marker.
        """
        if max_msg_sz < len(TRUNCATION_MARKER):
            raise ValueError(
                f"max_msg_sz must be at least {len(TRUNCATION_MARKER)} "
                "characters to accommodate truncation indicator"
            )

        super().__init__(fmt, datefmt)
        self.max_msg_sz: int = max_msg_sz

    def format(self, record: logging.LogRecord) -> str:
        """Formats the record, truncating its message if it exceeds max_msg_sz.

        The record is restored afterwards so other handlers see the full message.
        """
        message_content: str = record.getMessage()

        if len(message_content) > self.max_msg_sz:
            original_msg = record.msg
            original_args = record.args

            truncate_length: int = self.max_msg_sz - len(TRUNCATION_MARKER)
            record.msg = message_content[:truncate_length] + TRUNCATION_MARKER
            record.args = None

            formatted: str = super().format(record)

            record.msg = original_msg
            record.args = original_args
            return formatted

        return super().format(record)


def get_logger(
    run_name: str = "simplexopt",
    results_dir: Optional[pathlib.Path] = None,
    append_mode: bool = False,
    level: int = logging.INFO,
    max_msg_sz: int = 256,
) -> logging.Logger:
    """Creates a logger for one optimization run.

    The logger writes to stdout and, if results_dir is given, to
    results_dir/results.log. Each message is prefixed with the run name.
    Calling this again with the same arguments returns the same logger without
    adding duplicate handlers.

    Args:
        run_name: Name used in the logger name and in every message prefix.
        results_dir: Directory where the log file is created. If None, logs only to stdout.
        append_mode: If True, append to an existing log file; if False, overwrite.
        level: Logging level of the logger and its handlers.
        max_msg_sz: Maximum size for log messages in characters.

    Returns:
        Configured Logger instance.
    """
    if results_dir:
        sanitized_dir: str = str(results_dir).replace("/", "_").replace("\\", "_")
        logger_name: str = f"simplexopt.run.{run_name}.{sanitized_dir}"
    else:
        logger_name = f"simplexopt.run.{run_name}"

    logger: logging.Logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    if not logger.handlers:
        log_formatter = SizeLimitedFormatter(
            f"[{run_name}] %(asctime)s | %(levelname)s | %(message)s",
            max_msg_sz=max_msg_sz,
        )
        logger.propagate = False

        stream_handler: logging.StreamHandler = logging.StreamHandler()
        stream_handler.setFormatter(log_formatter)
        logger.addHandler(stream_handler)

        if results_dir:
            fh: logging.FileHandler = logging.FileHandler(
                pathlib.Path(results_dir).joinpath("results.log"),
                mode="a" if append_mode else "w",
            )
            fh.setFormatter(log_formatter)
            logger.addHandler(fh)

    return logger
