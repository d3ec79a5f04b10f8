from __future__ import annotations

import re
from pathlib import Path

SCRIPT_EXTENSIONS = (".js", ".ts")
EXCLUDED_MARKERS = (".spec.", ".test.")
SCRIPT_SUFFIX = ".js"
GLOBAL_FOLDER = "global"

SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    return SLUG_SEPARATOR_RE.sub("-", value.lower()).strip("-")


def is_script_file(path: Path) -> bool:
    name = path.name
    if not name.endswith(SCRIPT_EXTENSIONS):
        return False
    return not any(marker in name for marker in EXCLUDED_MARKERS)


def container_folder(label: str, container_id: str = "") -> str:
    return slugify(label) or slugify(container_id) or GLOBAL_FOLDER


def script_filename(name: str, node_id: str) -> str:
    stem = slugify(name) or node_id
    return stem + SCRIPT_SUFFIX


def resolve_cli_path(raw: str, cwd: Path | None = None) -> Path:
    path = Path(raw)
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    return path.resolve()


def display_path(path: Path, root: Path) -> str:
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)
