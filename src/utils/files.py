"""File utility helpers."""
from __future__ import annotations

import contextlib
import os
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Union


@contextmanager
def atomic_write(
    path: Union[str, Path],
    *,
    encoding: str = "utf-8",
    permissions: int = 0o644,
) -> Iterator[IO[str]]:
    """Write a text file via a sibling temporary file and ``os.replace``.

    Readers never observe a half-written park store: the target is either
    the previous content or the complete new content. The temporary file is
    removed again when the body raises.
    """
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_name(f"{target.name}.{uuid.uuid4().hex}.tmp")

    try:
        with open(tmp_path, "w", encoding=encoding) as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        with contextlib.suppress(OSError):
            os.chmod(tmp_path, permissions)
        os.replace(tmp_path, target)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise
