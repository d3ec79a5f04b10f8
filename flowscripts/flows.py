from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from .errors import FlowScriptError, diag
from .io_atomic import atomic_write_text

FLOWS_INDENT = 4
CONTAINER_LABEL_FIELDS = {"tab": "label", "subflow": "name"}
UNNAMED_CONTAINER = "unnamed"


@dataclass
class FlowDocument:
    """A flows.json array. Entries the tools do not understand are kept verbatim."""

    path: Path
    nodes: list[Any]
    _by_id: dict[str, dict[str, Any]] = field(default_factory=dict, init=False, repr=False)
    _labels: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for entry in self.nodes:
            if not isinstance(entry, dict):
                continue
            node_id = entry.get("id")
            if isinstance(node_id, str) and node_id:
                self._by_id.setdefault(node_id, entry)
            label_field = CONTAINER_LABEL_FIELDS.get(entry.get("type"))
            if label_field and isinstance(node_id, str):
                self._labels[node_id] = entry.get(label_field) or UNNAMED_CONTAINER

    def node(self, node_id: str) -> dict[str, Any] | None:
        return self._by_id.get(node_id)

    def function_nodes(self) -> Iterator[dict[str, Any]]:
        for entry in self.nodes:
            if isinstance(entry, dict) and entry.get("type") == "function":
                yield entry

    def container_label(self, container_id: str | None, default: str) -> str:
        if not container_id:
            return default
        return self._labels.get(container_id, default)

    def dumps(self) -> str:
        return json.dumps(self.nodes, ensure_ascii=False, indent=FLOWS_INDENT) + "\n"

    def save(self) -> None:
        atomic_write_text(self.path, self.dumps())


def load_flows(path: Path) -> FlowDocument:
    if not path.is_file():
        raise FlowScriptError(diag("E_FLOWS_NOT_FOUND", "flows document not found", "existing file", "missing", path))
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FlowScriptError(diag("E_FLOWS_UNREADABLE", "flows document could not be read", "utf-8 text", str(exc), path)) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FlowScriptError(
            diag("E_FLOWS_JSON_INVALID", "flows document is not valid JSON", "JSON array", f"{exc.msg} at line {exc.lineno}", path)
        ) from exc
    if not isinstance(data, list):
        raise FlowScriptError(diag("E_FLOWS_SCHEMA_INVALID", "flows document root must be an array", "array", type(data).__name__, path))
    return FlowDocument(path=path, nodes=data)


def node_label(node: dict[str, Any]) -> str:
    return node.get("name") or "unnamed"


def node_body(node: dict[str, Any]) -> str:
    body = node.get("func")
    return body if isinstance(body, str) else ""


def node_container(node: dict[str, Any]) -> str:
    z = node.get("z")
    return z if isinstance(z, str) else ""
