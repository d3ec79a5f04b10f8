from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path

from .errors import FlowScriptError, diag
from .flows import FlowDocument, load_flows, node_body, node_container, node_label
from .index import build_id_index, read_script
from .io_atomic import atomic_write_text, move_file
from .metadata import decode_metadata
from .paths import GLOBAL_FOLDER, container_folder, display_path, resolve_cli_path, script_filename, slugify
from .report import info, ok, print_fatal
from .scan import SCAN_LIMIT, format_scan_table, scan_functions
from .wrapper import wrap

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_MOVED = "moved"


@dataclass(frozen=True)
class ExtractResult:
    node_id: str
    action: str
    path: Path
    previous_path: Path | None = None


def _owner_id(path: Path) -> str | None:
    content = read_script(path)
    if content is None:
        return None
    meta = decode_metadata(content)
    return meta.id if meta else None


def canonical_path(document: FlowDocument, node: dict, src_root: Path) -> Path:
    """``src_root/<container-slug>/<name-slug>.js`` for ``node``."""
    z = node_container(node)
    folder = container_folder(document.container_label(z, GLOBAL_FOLDER), z)
    node_id = str(node["id"])
    return src_root / folder / script_filename(node.get("name") or "", node_id)


def _claim_target(target: Path, node_id: str) -> Path:
    # A file at the target that is not this node's keeps its place; this one gets an id suffix.
    if not target.exists() or _owner_id(target) == node_id:
        return target
    suffix = slugify(node_id) or node_id
    alt = target.with_name(f"{target.stem}-{suffix}{target.suffix}")
    if alt.exists() and _owner_id(alt) != node_id:
        raise FlowScriptError(
            diag("E_TARGET_OCCUPIED", "target file belongs to another script", node_id, str(_owner_id(alt)), alt)
        )
    return alt


def extract_node(document: FlowDocument, node_id: str, src_root: Path) -> ExtractResult:
    node = document.node(node_id)
    if node is None:
        raise FlowScriptError(diag("E_NODE_NOT_FOUND", f"node {node_id} not found in flows document", "existing id", node_id, document.path))
    if node.get("type") != "function":
        raise FlowScriptError(
            diag("E_NODE_NOT_FUNCTION", f"node {node_id} is not a function node", "function", str(node.get("type")), document.path)
        )
    z = node_container(node)
    if not z:
        raise FlowScriptError(
            diag(
                "E_NODE_CONTAINER_MISSING",
                f"node {node_id} has no container id (global scope); only nodes on a tab or subflow can be extracted",
                "non-empty z",
                "empty",
                document.path,
            )
        )

    target = _claim_target(canonical_path(document, node, src_root), node_id)
    content = wrap(node_id, node.get("name") or "", node_body(node), z)
    existing = build_id_index(src_root).get(node_id)

    if existing is None:
        atomic_write_text(target, content)
        return ExtractResult(node_id=node_id, action=ACTION_CREATED, path=target)
    if existing.resolve() == target.resolve() or target.exists():
        # target.exists() here means it already holds a stray copy of this id.
        atomic_write_text(target, content)
        return ExtractResult(node_id=node_id, action=ACTION_UPDATED, path=target)

    move_file(existing, target)
    atomic_write_text(target, content)
    return ExtractResult(node_id=node_id, action=ACTION_MOVED, path=target, previous_path=existing)


def _run_scan(document: FlowDocument, src_root: Path, limit: int, as_json: bool) -> int:
    entries = scan_functions(document, src_root, limit=limit)
    if as_json:
        print(json.dumps([e.to_dict() for e in entries], ensure_ascii=False, indent=2))
        return 0
    print(format_scan_table(entries), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="nr-extract",
        description="Extract a function node from flows.json into a local script file.",
    )
    ap.add_argument("node_id", nargs="?", help="Id of the function node to extract.")
    ap.add_argument("--flows", default="flows.json", help="Path to flows.json (default: flows.json).")
    ap.add_argument("--src", default="src", help="Script root directory (default: src).")
    ap.add_argument("--scan", action="store_true", help="Rank function nodes by complexity instead of extracting.")
    ap.add_argument("--limit", type=int, default=SCAN_LIMIT, help=f"Rows in the scan report (default: {SCAN_LIMIT}).")
    ap.add_argument("--json", action="store_true", help="Print the scan report as JSON.")
    args = ap.parse_args(argv)

    flows_path = resolve_cli_path(args.flows)
    src_root = resolve_cli_path(args.src)
    if args.limit < 1:
        print("E_SCAN_LIMIT_INVALID: --limit must be positive", file=sys.stderr)
        return 2

    try:
        document = load_flows(flows_path)
        if args.scan:
            return _run_scan(document, src_root, args.limit, args.json)
        if not args.node_id:
            raise FlowScriptError(diag("E_NODE_ID_REQUIRED", "node_id is required unless --scan is used"))
        node = document.node(args.node_id)
        if node is None:
            raise FlowScriptError(
                diag("E_NODE_NOT_FOUND", f"node {args.node_id} not found in flows document", "existing id", args.node_id, flows_path)
            )
        info(f"Found node '{node_label(node)}' ({args.node_id})")
        if not src_root.is_dir():
            raise FlowScriptError(diag("E_SRC_NOT_FOUND", "script root directory not found", "directory", "missing", src_root))
        result = extract_node(document, args.node_id, src_root)
    except FlowScriptError as exc:
        return print_fatal(exc)
    except (OSError, ValueError) as exc:
        print(f"E_EXTRACT_WRITE_FAILED: {exc}", file=sys.stderr)
        return 2

    rel = display_path(result.path, src_root)
    if result.action == ACTION_MOVED and result.previous_path is not None:
        info(f"Moved {display_path(result.previous_path, src_root)} -> {rel}")
    ok(f"{result.action} {rel}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
