from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .errors import Diagnostic, FlowScriptError, diag
from .flows import FlowDocument, load_flows, node_container, node_label
from .index import collect_scripts
from .paths import display_path, resolve_cli_path
from .report import info, ok, print_diagnostics, print_fatal
from .wrapper import unwrap


@dataclass
class SyncReport:
    updated: list[str] = field(default_factory=list)
    moved: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.updated or self.moved)

    @property
    def changed_count(self) -> int:
        return len(set(self.updated) | set(self.moved))


def sync_scripts(document: FlowDocument, src_root: Path) -> SyncReport:
    """Copy script bodies and container ids from ``src_root`` into ``document`` nodes."""
    report = SyncReport()
    scripts = collect_scripts(src_root, report.diagnostics)
    for node_id, script in scripts.items():
        node = document.node(node_id)
        if node is None:
            report.diagnostics.append(
                diag("W_SYNC_NODE_NOT_FOUND", f"node {node_id} not found in flows document", "existing id", node_id, script.path)
            )
            continue
        if node.get("type") != "function":
            report.diagnostics.append(
                diag("W_SYNC_NODE_NOT_FUNCTION", f"node {node_id} is not a function node", "function", str(node.get("type")), script.path)
            )
            continue

        body = unwrap(script.content)
        if node.get("func") != body:
            node["func"] = body
            report.updated.append(node_id)

        z = script.metadata.z
        if z and node_container(node) != z:
            node["z"] = z
            report.moved.append(node_id)

        if node_id not in report.updated and node_id not in report.moved:
            report.unchanged.append(node_id)
    return report


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="nr-sync", description="Synchronize local script files back into flows.json.")
    ap.add_argument("--flows", default="flows.json", help="Path to flows.json (default: flows.json).")
    ap.add_argument("--src", default="src", help="Script root directory (default: src).")
    args = ap.parse_args(argv)

    flows_path = resolve_cli_path(args.flows)
    src_root = resolve_cli_path(args.src)
    try:
        if not src_root.is_dir():
            raise FlowScriptError(diag("E_SRC_NOT_FOUND", "script root directory not found", "directory", "missing", src_root))
        document = load_flows(flows_path)
    except FlowScriptError as exc:
        return print_fatal(exc)

    info(f"Scanning {src_root} for scripts")
    report = sync_scripts(document, src_root)
    print_diagnostics(report.diagnostics)

    for node_id in report.updated:
        node = document.node(node_id) or {}
        info(f"Updated code of '{node_label(node)}' ({node_id})")
    for node_id in report.moved:
        node = document.node(node_id) or {}
        info(f"Moved '{node_label(node)}' ({node_id}) to container {node_container(node)}")

    if not report.changed:
        ok(f"flows already up to date ({len(report.unchanged)} scripts checked)")
        return 0
    try:
        document.save()
    except (OSError, ValueError) as exc:
        print(f"E_FLOWS_WRITE_FAILED: {exc}", file=sys.stderr)
        return 2
    ok(f"wrote {report.changed_count} changes to {display_path(flows_path, Path.cwd())}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
