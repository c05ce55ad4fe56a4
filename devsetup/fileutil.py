"""Filesystem helpers."""

import os
from pathlib import Path
from typing import Optional


def atomic_write(target: Path, content: str, mode: Optional[int] = None):
    """Write content to a file atomically via a temp file + rename.

    The temp file is created with ``mode`` already applied, so a secret is
    never readable by others while it is being written. On failure the temp
    file is removed and the target is left untouched.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_suffix(target.suffix + '.tmp')
    tmp_path.unlink(missing_ok=True)
    fd = os.open(tmp_path, os.O_CREAT | os.O_WRONLY | os.O_EXCL, 0o666 if mode is None else mode)
    try:
        with os.fdopen(fd, 'w') as f:
            f.write(content)
        if mode is not None:
            # O_CREAT honours the umask; set the exact bits
            tmp_path.chmod(mode)
        tmp_path.replace(target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
