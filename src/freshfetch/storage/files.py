"""Writers for fetched artifacts.

The modification time of a written file doubles as the "last successful run"
marker read back by the staleness check, so callers stamp it explicitly with
:func:`update_last_modified` after a successful write.

Writers fill a hidden sibling file and move it over the target only once the
write has finished, so a failed write leaves the previous copy untouched.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

import structlog

from freshfetch.config import settings

logger = structlog.get_logger()

CHUNK_SIZE = 64 * 1024


class StorageError(RuntimeError):
    """Raised when an artifact cannot be written."""


def close_quietly(resource, **context) -> None:
    """Close ``resource``, logging instead of raising if closing fails."""
    try:
        resource.close()
    except Exception as e:
        logger.warning("Ignoring error while closing resource", error=str(e), **context)


def _ensure_parent_dirs(path: Path) -> None:
    parent = path.parent
    if parent.exists():
        return
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Could not create the parent directory of {path}") from e


@contextmanager
def _replacing(target: Path) -> Iterator[Path]:
    """Yield a partial file path that replaces ``target`` when the block succeeds."""
    partial = target.with_name(f".{target.name}.{uuid4().hex}.part")
    try:
        yield partial
        try:
            os.replace(partial, target)
        except OSError as e:
            raise StorageError(f"Could not write {target}") from e
    except BaseException:
        with suppress(OSError):
            partial.unlink(missing_ok=True)
        raise


def write_lines(lines: Iterable[str] | None, path: str | os.PathLike | None) -> None:
    """Write ``lines`` to ``path``, one newline-terminated line each.

    Output uses the configured legacy encoding (CP1252 by default) whatever
    the source charset was; unmappable characters become ``?``.
    """
    if lines is None or path is None:
        return

    target = Path(path)
    _ensure_parent_dirs(target)

    with _replacing(target) as partial:
        handle = None
        try:
            handle = partial.open("w", encoding=settings.output_encoding, errors="replace", newline="\n")
            count = 0
            for line in lines:
                handle.write(line)
                handle.write("\n")
                count += 1
            handle.flush()
        except OSError as e:
            raise StorageError(f"Could not write {target}") from e
        finally:
            if handle is not None:
                close_quietly(handle, path=str(target))

    logger.debug("Wrote lines", path=str(target), lines=count)


def write_stream(stream: BinaryIO | Iterable[bytes] | None, path: str | os.PathLike | None) -> None:
    """Copy a byte stream verbatim to ``path``.

    ``stream`` is either a binary file-like object or an iterable of chunks.
    Errors raised by the stream itself propagate unchanged.
    """
    if stream is None or path is None:
        return

    target = Path(path)
    _ensure_parent_dirs(target)

    if hasattr(stream, "read"):
        chunks: Iterable[bytes] = iter(lambda: stream.read(CHUNK_SIZE), b"")
    else:
        chunks = stream

    with _replacing(target) as partial:
        handle = None
        try:
            handle = partial.open("wb")
            size = 0
            for chunk in chunks:
                handle.write(chunk)
                size += len(chunk)
            handle.flush()
        except OSError as e:
            raise StorageError(f"Could not write {target}") from e
        finally:
            if handle is not None:
                close_quietly(handle, path=str(target))

    logger.debug("Wrote stream", path=str(target), bytes=size)


def update_last_modified(path: str | os.PathLike | None, timestamp: int) -> None:
    """Set the modification time of ``path`` to ``timestamp`` (epoch milliseconds).

    Missing files and negative timestamps are ignored.
    """
    if path is None:
        return

    target = Path(path)
    if not target.exists() or timestamp < 0:
        return

    try:
        atime_ns = target.stat().st_atime_ns
        os.utime(target, ns=(atime_ns, timestamp * 1_000_000))
    except OSError as e:
        raise StorageError(f"Could not set the modification time of {target}") from e


def last_modified(path: str | os.PathLike | None) -> int:
    """Modification time of ``path`` in epoch milliseconds, 0 if it does not exist."""
    if path is None:
        return 0
    target = Path(path)
    if not target.exists():
        return 0
    return target.stat().st_mtime_ns // 1_000_000
