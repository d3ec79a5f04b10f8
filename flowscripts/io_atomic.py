from __future__ import annotations

import os
import tempfile
from pathlib import Path


def _fsync_dir(directory: Path) -> None:
    if not hasattr(os, "O_DIRECTORY"):
        return
    dir_fd = os.open(directory, os.O_DIRECTORY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``text`` in one rename; the old mode is kept."""
    if path.is_symlink():
        raise ValueError(f"E_WRITE_SYMLINK: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    existing_mode: int | None = None
    if path.exists():
        try:
            existing_mode = path.stat().st_mode & 0o777
        except OSError:
            existing_mode = None
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding=encoding, newline="\n", delete=False, dir=path.parent, prefix=f".{path.name}."
        ) as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = Path(tmp.name)
        if existing_mode is not None:
            os.chmod(tmp_path, existing_mode)
        os.replace(tmp_path, path)
        tmp_path = None
        _fsync_dir(path.parent)
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def move_file(source: Path, target: Path) -> None:
    """Move ``source`` to ``target``; refuses to clobber an existing file."""
    if target.exists() and target.resolve() != source.resolve():
        raise FileExistsError(f"E_MOVE_TARGET_EXISTS: {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    os.replace(source, target)
    _fsync_dir(target.parent)
