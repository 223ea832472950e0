"""Local notification channel: appends events to notifications.jsonl."""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any, Dict, List

from models import NotificationLevel

from .base import BaseNotifier


class JsonlNotifier(BaseNotifier):
    """Writes one JSON line per notification; also keeps them in memory."""

    channel = "jsonl"

    def __init__(self, out_dir: str | Path | None = None) -> None:
        self.out_dir = Path(out_dir) if out_dir else None
        self.events: List[Dict[str, Any]] = []

    @property
    def log_path(self) -> Path | None:
        if self.out_dir is None:
            return None
        return self.out_dir / "notifications.jsonl"

    async def _send(self, level: NotificationLevel, title: str, body: str) -> None:
        entry = {
            "channel": self.channel,
            "level": level.value,
            "title": title,
            "body": body,
            "sent_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }
        self.events.append(entry)
        if self.log_path is not None:
            self.out_dir.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(entry, ensure_ascii=False) + "\n")
