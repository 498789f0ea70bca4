# capview/infrastructure/log.py
#
# Shared logger with elapsed time.
#
# Design decisions:
#   - Single log() function, plain stdout with flush. No logging framework.
#   - Elapsed time since import is shown so slow upstream fetches and exports
#     stand out in the service output.
#   - Every line about one company carries its id in a fixed "company=<id>"
#     field, so one snapshot can be followed from fetch to export with grep.
#   - Callers never log holder names or addresses, only ids and counts.
from __future__ import annotations

import sys
import time

_start = time.monotonic()


def format_line(message: str, company: object | None = None, elapsed: float = 0.0) -> str:
    minutes, seconds = divmod(int(elapsed), 60)
    context = f" company={company}" if company is not None else ""
    return f"[capview {minutes:02d}:{seconds:02d}]{context} {message}"


def log(message: str, company: object | None = None) -> None:
    """Write a timestamped log line to stdout, tagged with the company id when given."""
    sys.stdout.write(format_line(message, company, time.monotonic() - _start) + "\n")
    sys.stdout.flush()
