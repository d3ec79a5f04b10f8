from __future__ import annotations

import re
import textwrap

from .metadata import encode_metadata, strip_metadata

INDENT = "    "
WRAPPER_HEADER = "module.exports = function (msg, flow, env, node, global, context) {"
WRAPPER_FOOTER = "};"
WRAPPER_START_RE = re.compile(r"module\.exports\s*=\s*(?:async\s+)?function\s*\([^)]*\)\s*\{")


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _indent_body(body: str) -> str:
    lines = normalize_newlines(body).split("\n")
    return "\n".join(INDENT + line if line.strip() else "" for line in lines)


def wrap(node_id: str, name: str, body: str, z: str) -> str:
    text = "\n".join(
        [
            WRAPPER_HEADER,
            _indent_body(body),
            WRAPPER_FOOTER,
            "",
            encode_metadata(node_id, name, z),
        ]
    )
    return text.strip() + "\n"


def _trim_blank_edges(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _outdent(text: str) -> str:
    lines = _trim_blank_edges([line.rstrip() for line in text.split("\n")])
    if not lines:
        return ""
    filled = [line for line in lines if line]
    if all(line.startswith(INDENT) for line in filled):
        return "\n".join(line[len(INDENT):] if line else line for line in lines)
    return textwrap.dedent("\n".join(lines))


def unwrap(content: str) -> str:
    # The body ends at the last "};" so a body line ending the same way survives.
    text = strip_metadata(normalize_newlines(content)).strip()
    start = WRAPPER_START_RE.search(text)
    if start is None:
        return text
    text = text[start.end():]
    footer = text.rfind(WRAPPER_FOOTER)
    if footer != -1:
        text = text[:footer]
    return _outdent(text)
