from __future__ import annotations

import argparse
from dataclasses import dataclass, field, replace
from pathlib import Path

from .errors import Diagnostic, FlowScriptError, diag
from .flows import FlowDocument, load_flows, node_container
from .index import iter_script_files, read_script
from .io_atomic import atomic_write_text, move_file
from .metadata import decode_metadata
from .paths import GLOBAL_FOLDER, container_folder, display_path, resolve_cli_path
from .report import info, ok, print_diagnostics, print_fatal
from .wrapper import unwrap, wrap


@dataclass
class MigrateReport:
    scanned: int = 0
    migrated: list[Path] = field(default_factory=list)
    moved: list[tuple[Path, Path]] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _target_for(document: FlowDocument, src_root: Path, path: Path, z: str) -> Path:
    folder = container_folder(document.container_label(z, GLOBAL_FOLDER), z)
    return src_root / folder / path.name


def migrate_scripts(src_root: Path, document: FlowDocument | None = None) -> MigrateReport:
    # The file list is taken before anything moves so a relocated file is not visited twice.
    report = MigrateReport()
    for path in iter_script_files(src_root):
        report.scanned += 1
        content = read_script(path, report.diagnostics)
        if content is None:
            continue
        meta = decode_metadata(content, report.diagnostics, str(path))
        if meta is None:
            continue

        if document is not None and not meta.z:
            node = document.node(meta.id)
            if node is not None:
                meta = replace(meta, z=node_container(node))
        if not meta.z:
            report.diagnostics.append(
                diag("W_MIGRATE_CONTAINER_UNKNOWN", f"container id of {meta.id} unknown; file left as is", "z", "missing", path)
            )
            continue

        if meta.legacy:
            try:
                atomic_write_text(path, wrap(meta.id, meta.name, unwrap(content), meta.z))
            except (OSError, ValueError) as exc:
                report.diagnostics.append(diag("W_MIGRATE_WRITE_FAILED", "could not rewrite script", "writable file", str(exc), path))
                continue
            report.migrated.append(path)

        if document is None:
            continue
        target = _target_for(document, src_root, path, meta.z)
        if target.resolve() == path.resolve():
            continue
        if target.exists():
            report.diagnostics.append(
                diag("W_MIGRATE_TARGET_EXISTS", "target file already exists; file not moved", "free path", str(target), path)
            )
            continue
        try:
            move_file(path, target)
        except OSError as exc:
            report.diagnostics.append(diag("W_MIGRATE_MOVE_FAILED", "could not move script", str(target), str(exc), path))
            continue
        report.moved.append((path, target))
    return report


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="nr-migrate",
        description="Migrate script metadata to the tag format and organize files into container folders.",
    )
    ap.add_argument("--src", default="src", help="Script root directory (default: src).")
    ap.add_argument("--flows", help="Optional flows.json used to fill container ids and pick folders.")
    args = ap.parse_args(argv)

    src_root = resolve_cli_path(args.src)
    document: FlowDocument | None = None
    try:
        if not src_root.is_dir():
            raise FlowScriptError(diag("E_SRC_NOT_FOUND", "script root directory not found", "directory", "missing", src_root))
        if args.flows:
            document = load_flows(resolve_cli_path(args.flows))
            info(f"Loaded {len(document.nodes)} nodes from {document.path.name}")
    except FlowScriptError as exc:
        return print_fatal(exc)

    info(f"Scanning {src_root} for scripts to migrate")
    report = migrate_scripts(src_root, document)
    print_diagnostics(report.diagnostics)
    for path in report.migrated:
        info(f"Migrated metadata of {display_path(path, src_root)}")
    for source, target in report.moved:
        info(f"Moved {display_path(source, src_root)} -> {display_path(target, src_root)}")
    ok(f"scanned {report.scanned} files, migrated {len(report.migrated)}, moved {len(report.moved)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
