from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .flows import FlowDocument, node_body, node_container
from .index import build_id_index

COMPLEXITY_RE = re.compile(r"\b(?:if|else|for|while|case|catch|switch|do)\b|&&|\|\||\?")
SCAN_LIMIT = 20
SCAN_CONTAINER_DEFAULT = "Global/Subflow"
TABLE_CONTAINER_WIDTH = 18


@dataclass(frozen=True)
class ScanEntry:
    id: str
    name: str
    loc: int
    complexity: int
    extracted: bool
    container: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def count_loc(code: str) -> int:
    return sum(1 for line in code.split("\n") if line.strip())


def complexity_score(code: str) -> int:
    # 1 for the function itself plus one per branch or short-circuit token.
    return 1 + len(COMPLEXITY_RE.findall(code))


def scan_functions(document: FlowDocument, src_root: Path, limit: int | None = SCAN_LIMIT) -> list[ScanEntry]:
    extracted = build_id_index(src_root)
    entries: list[ScanEntry] = []
    for node in document.function_nodes():
        body = node_body(node)
        if not body:
            continue
        node_id = str(node.get("id", ""))
        entries.append(
            ScanEntry(
                id=node_id,
                name=node.get("name") or "unnamed",
                loc=count_loc(body),
                complexity=complexity_score(body),
                extracted=node_id in extracted,
                container=document.container_label(node_container(node), SCAN_CONTAINER_DEFAULT),
            )
        )
    entries.sort(key=lambda e: e.complexity, reverse=True)
    if limit is not None:
        entries = entries[:limit]
    return entries


def _clip(value: str, width: int) -> str:
    if len(value) > width:
        return value[:width] + ".."
    return value


def format_scan_table(entries: list[ScanEntry]) -> str:
    lines = [
        f"{'COMPLEXITY':<12} {'LOC':<8} {'EXTRACTED':<10} {'CONTAINER':<20} {'ID':<18} NAME",
        "-" * 100,
    ]
    for e in entries:
        flag = "YES" if e.extracted else "-"
        container = _clip(e.container, TABLE_CONTAINER_WIDTH)
        lines.append(f"{e.complexity:<12} {e.loc:<8} {flag:<10} {container:<20} {e.id:<18} {e.name}")
    return "\n".join(lines) + "\n"
