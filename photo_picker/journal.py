from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from photo_picker.time_utils import timestamp_str

LOGGER = logging.getLogger(__name__)


class JsonlLogger:
    """Append-only JSON-lines file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def append(self, data: dict[str, Any]) -> None:
        entry = {"time": timestamp_str(), **data}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as exc:
            # The journal is informational; a pick must not fail because of it.
            LOGGER.warning("Failed to write journal %s: %s", self.path, exc)

    def read_all(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        entries: list[dict[str, Any]] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError:
                continue
        return entries


def picks_journal(output_dir: Path) -> JsonlLogger:
    return JsonlLogger(Path(output_dir) / "meta" / "picks.jsonl")
