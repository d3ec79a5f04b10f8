from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import Diagnostic, diag
from .metadata import Metadata, decode_metadata
from .paths import is_script_file


@dataclass(frozen=True)
class ScriptFile:
    path: Path
    metadata: Metadata
    content: str


def iter_script_files(root: Path) -> list[Path]:
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file() and is_script_file(p))


def read_script(path: Path, diags: list[Diagnostic] | None = None) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        if diags is not None:
            diags.append(diag("W_SCRIPT_UNREADABLE", "could not read script file", "utf-8 text", str(exc), path))
        return None


def collect_scripts(root: Path, diags: list[Diagnostic] | None = None) -> dict[str, ScriptFile]:
    # Two files claiming one id resolve to the later one in sorted path order.
    scripts: dict[str, ScriptFile] = {}
    for path in iter_script_files(root):
        content = read_script(path, diags)
        if content is None:
            continue
        meta = decode_metadata(content, diags, str(path))
        if meta is None or not meta.id:
            continue
        scripts[meta.id] = ScriptFile(path=path, metadata=meta, content=content)
    return scripts


def build_id_index(root: Path) -> dict[str, Path]:
    return {node_id: script.path for node_id, script in collect_scripts(root).items()}
