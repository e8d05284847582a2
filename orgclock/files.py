# orgclock/files.py
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, List, Union

from .document import OrgDocument, parse_document
from .util.console import eprint, obs_enabled

PathLike = Union[str, Path]


def default_org_dir() -> Path:
    raw = (os.getenv("ORGCLOCK_DIR", "") or "").strip()
    return Path(raw).expanduser() if raw else Path.home() / "org"


def discover_org_files(directory: PathLike) -> List[Path]:
    """Regular `*.org` files directly inside `directory`, sorted by name."""
    root = Path(directory)
    return sorted(p for p in root.iterdir() if p.is_file() and p.suffix == ".org")


def read_org_text(path: PathLike) -> str:
    # newline="" keeps "\r\n" intact so untouched lines are written back byte-identical.
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_org_text(path: PathLike, text: str) -> None:
    """Replace the file's content in one step (temp file + rename)."""
    target = Path(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if target.exists():
            os.chmod(tmp, target.stat().st_mode & 0o7777)
        os.replace(tmp, target)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    if obs_enabled():
        eprint(f"[orgclock.files] write.ok file={target} bytes={len(text.encode('utf-8'))}")


def load_documents(
    files: List[Path],
    read_text: Callable[[Path], str] = read_org_text,
) -> List[OrgDocument]:
    return [parse_document(p, read_text(p)) for p in files]
