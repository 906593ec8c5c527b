"""Append-only JSONL backup of processed submissions."""

from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


class AuditLog:
    """Write one JSON line per processed submission.

    The database rows are the source of truth; this file is a human-readable
    backup, written after the transaction commits.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    async def append(self, kind: str, data: Any) -> None:
        """Append a record of the given kind."""
        payload = data.model_dump() if hasattr(data, "model_dump") else dict(data)
        entry = {"kind": kind, "logged_at": datetime.now(UTC).isoformat(), **payload}

        def _write() -> None:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")

        await asyncio.to_thread(_write)

    def read(self) -> list[dict[str, Any]]:
        """Read all entries back, oldest first."""
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
