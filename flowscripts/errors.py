from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str
    expected: str
    got: str
    path: str


def diag(code: str, message: str, expected: str = "", got: str = "", path: str | Path = "") -> Diagnostic:
    return Diagnostic(code=code, message=message, expected=expected, got=got, path=str(path))


class FlowScriptError(Exception):
    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(f"{diagnostic.code}: {diagnostic.message}")
        self.diagnostic = diagnostic

    @property
    def code(self) -> str:
        return self.diagnostic.code
