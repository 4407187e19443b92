"""Small filesystem helpers shared by the persisted caches."""

from __future__ import annotations

import contextlib
import os
import tempfile
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    from pathlib import Path


def encode_json(value: object) -> bytes:
    """Encode ``value`` as indented JSON with deterministic key order."""
    raw = msgspec.json.encode(value, order="deterministic")
    return msgspec.json.format(raw, indent=2) + b"\n"


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a sibling temp file and ``os.replace``.

    Readers never observe a partially written file, even when two tasks
    write the same path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def read_optional(path: Path) -> bytes | None:
    """Return the bytes at ``path`` or ``None`` when it does not exist."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


__all__ = ["encode_json", "read_optional", "write_atomic"]
