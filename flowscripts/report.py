from __future__ import annotations

import sys

from .errors import Diagnostic, FlowScriptError


def info(message: str) -> None:
    print(message)


def ok(message: str) -> None:
    print(f"[OK] {message}")


def print_diagnostics(diags: list[Diagnostic]) -> None:
    for d in diags:
        suffix = f" ({d.path})" if d.path else ""
        detail = f": {d.got}" if d.got else ""
        print(f"[WARN] {d.code}: {d.message}{detail}{suffix}", file=sys.stderr)


def print_fatal(exc: FlowScriptError) -> int:
    d = exc.diagnostic
    suffix = f" ({d.path})" if d.path else ""
    print(f"{d.code}: {d.message}{suffix}", file=sys.stderr)
    return 2
