"""Saving response export blobs downloaded from the backend."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from questify.constants.quiz_constants import EXPORT_FILE_EXTENSIONS


def default_export_name(fmt: str, moment: datetime | None = None) -> str:
    """File name used by the web client: ``quiz_responses_<epoch ms>.<ext>``."""
    if fmt not in EXPORT_FILE_EXTENSIONS:
        raise ValueError(f"Unsupported export format: {fmt!r}")
    stamp = int((moment or datetime.now()).timestamp() * 1000)
    return f"quiz_responses_{stamp}.{EXPORT_FILE_EXTENSIONS[fmt]}"


def save_export(directory: Path, fmt: str, content: bytes, moment: datetime | None = None) -> Path:
    """Write an export blob into ``directory`` and return the file path."""

    if not content:
        raise ValueError("Cannot save an empty export.")

    directory = directory.resolve()
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / default_export_name(fmt, moment)
    file_path.write_bytes(content)
    return file_path
