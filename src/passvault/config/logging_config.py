import logging
import os
import sys
import traceback
import pendulum

from passvault.config.config_vault import LOG_FILE


def timestamp() -> str:
    """Current local time as an ISO-8601 string, used to prefix log lines."""
    return pendulum.now().to_iso8601_string()


def setup_logging(log_file: str = LOG_FILE, level: int = logging.ERROR) -> None:

    if logging.getLogger().handlers:
        return  # already configured

    logging.basicConfig(
        filename=log_file,
        filemode="a",
        level=level,
        format="%(message)s",
    )

    sys.excepthook = log_uncaught_exceptions


def log_uncaught_exceptions(exctype, value, tb):
    now = timestamp()

    lines = []
    for frame in traceback.extract_tb(tb):
        filename = os.path.basename(frame.filename)
        lines.append(
            f'  File "{filename}", line {frame.lineno}, in {frame.name}'
        )

    trace_summary = "\n".join(reversed(lines)) if lines else "  <no traceback>"
    error_msg = f"{exctype.__name__}: {value}"

    logging.error(
        f"[{now}] Uncaught exception: {error_msg}\n"
        f"Traceback (most recent call last):\n"
        f"{trace_summary}\n"
        f"{error_msg}\n"
    )

    print("\nError! Something went wrong.", file=sys.stderr)
    print(f"Details saved to {LOG_FILE}\n", file=sys.stderr)
