from __future__ import annotations

import errno
import hashlib
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass(slots=True)
class TransferResult:
    source: Path
    target: Path
    success: bool
    error: Optional[str] = None
    checksum: Optional[str] = None


def file_checksum(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def path_exists(path: Path) -> Optional[bool]:
    try:
        path.stat()
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        if exc.errno != errno.ENAMETOOLONG:
            raise
        parent = path.parent
        try:
            with os.scandir(parent) as it:
                for entry in it:
                    if entry.name == path.name:
                        return True
        except FileNotFoundError:
            return None
        return False


def move_path(src: Path, dst: Path) -> None:
    try:
        src.rename(dst)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        # Cross-device rename; shutil.move copies then removes the source.
        shutil.move(str(src), str(dst))


def transfer_file(source: Path, target: Path, *, mode: str = "copy", verify: bool = True) -> TransferResult:
    """Copy or move ``source`` to ``target`` without overwriting anything.

    With ``verify`` the MD5 of the source is compared with the written
    target; a mismatched copy is removed again.
    """
    try:
        if path_exists(target):
            raise FileExistsError(f"Target already exists: {target}")
        target.parent.mkdir(parents=True, exist_ok=True)
        checksum = file_checksum(source) if verify else None
        if mode == "move":
            move_path(source, target)
        else:
            shutil.copy2(source, target)
        if checksum is not None:
            written = file_checksum(target)
            if written != checksum:
                if mode != "move":
                    target.unlink(missing_ok=True)
                raise IOError(f"Checksum mismatch: source={checksum}, target={written}")
        return TransferResult(source=source, target=target, success=True, checksum=checksum)
    except OSError as exc:
        logger.warning("Failed to %s %s -> %s: %s", mode, source, target, exc)
        return TransferResult(source=source, target=target, success=False, error=str(exc))
