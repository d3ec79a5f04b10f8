from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .errors import Diagnostic, diag
from .loose_json import parse_loose_object

TAG_NAMESPACE = "nr"
FORMAT_STRUCTURED = "structured"
FORMAT_LEGACY = "legacy"
LEGACY_CONTAINER_ALIASES = ("z", "tabId")

DOC_BLOCK_RE = re.compile(r"/\*\*(?P<body>(?:(?!/\*\*|\*/)[\s\S])*)\*/")
LEGACY_BLOCK_RE = re.compile(r"/\*\s*flows\.json (?:attributes|metadata)(?P<body>[\s\S]*?)\*/")
TAG_LINE_RE = re.compile(rf"@{TAG_NAMESPACE}-(?P<tag>id|name|z)\b[ \t]*(?P<value>.*)$")
TAG_PRESENT_RE = re.compile(rf"@{TAG_NAMESPACE}-(?:id|name|z)\b")


@dataclass(frozen=True)
class Metadata:
    """Identity of one script file. Only ``id`` is used for matching."""

    id: str
    name: str
    z: str
    format: str = FORMAT_STRUCTURED

    @property
    def legacy(self) -> bool:
        return self.format == FORMAT_LEGACY


def _iter_tagged_blocks(content: str):
    for match in DOC_BLOCK_RE.finditer(content):
        if TAG_PRESENT_RE.search(match.group("body")):
            yield match


def has_structured_block(content: str) -> bool:
    return next(_iter_tagged_blocks(content), None) is not None


def has_legacy_block(content: str) -> bool:
    return LEGACY_BLOCK_RE.search(content) is not None


def _decode_structured(content: str) -> Metadata | None:
    block = next(_iter_tagged_blocks(content), None)
    if block is None:
        return None
    tags: dict[str, str] = {}
    for line in block.group("body").splitlines():
        m = TAG_LINE_RE.search(line)
        if m:
            tags[m.group("tag")] = m.group("value").strip()
    node_id = tags.get("id", "")
    z = tags.get("z", "")
    if not node_id or not z:
        return None
    return Metadata(id=node_id, name=tags.get("name", ""), z=z, format=FORMAT_STRUCTURED)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _decode_legacy(content: str, diags: list[Diagnostic] | None, source: str) -> Metadata | None:
    block = LEGACY_BLOCK_RE.search(content)
    if block is None:
        return None
    raw = block.group("body").strip()
    if not raw:
        return None
    try:
        data = parse_loose_object(raw)
    except ValueError as exc:
        if diags is not None:
            diags.append(diag("W_METADATA_INVALID", "legacy metadata block failed to parse", "object members", str(exc), source))
        return None
    node_id = _as_text(data.get("id"))
    if not node_id:
        if diags is not None:
            diags.append(diag("W_METADATA_ID_MISSING", "legacy metadata block has no id", "id", "missing", source))
        return None
    z = ""
    for key in LEGACY_CONTAINER_ALIASES:
        z = _as_text(data.get(key))
        if z:
            break
    return Metadata(id=node_id, name=_as_text(data.get("name")), z=z, format=FORMAT_LEGACY)


def decode_metadata(content: str, diags: list[Diagnostic] | None = None, source: str = "") -> Metadata | None:
    meta = _decode_structured(content)
    if meta is not None:
        return meta
    return _decode_legacy(content, diags, source)


def _single_line(value: str) -> str:
    return " ".join(value.split())


def encode_metadata(node_id: str, name: str, z: str) -> str:
    lines = [
        "/**",
        f" * @{TAG_NAMESPACE}-id {_single_line(node_id)}",
        f" * @{TAG_NAMESPACE}-name {_single_line(name or '')}".rstrip(),
        f" * @{TAG_NAMESPACE}-z {_single_line(z or '')}".rstrip(),
        " */",
    ]
    return "\n".join(lines)


def strip_metadata(content: str) -> str:
    content = DOC_BLOCK_RE.sub(lambda m: "" if TAG_PRESENT_RE.search(m.group("body")) else m.group(0), content)
    return LEGACY_BLOCK_RE.sub("", content)
