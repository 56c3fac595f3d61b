from __future__ import annotations

import os
from pathlib import Path

from photo_picker.config import DEFAULT_CSV_PATH, DEFAULT_OUTPUT_DIR


def _expand(path_str: str) -> Path:
    return Path(path_str.replace("$HOME", str(Path.home())).replace('"', "")).expanduser()


def resolve_csv_path(explicit: str | Path | None = None) -> Path:
    if explicit:
        return _expand(str(explicit)).resolve()
    return _expand(os.getenv("PHOTO_PICKER_CSV") or DEFAULT_CSV_PATH).resolve()


def get_output_dir(explicit: str | Path | None = None) -> Path:
    if explicit:
        root = _expand(str(explicit))
    else:
        root = _expand(os.getenv("PHOTO_PICKER_OUTPUT") or DEFAULT_OUTPUT_DIR)
    root = root.resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root
