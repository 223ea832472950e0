"""Notification channels."""

from typing import Optional

from config import Settings, get_settings

from .base import BaseNotifier
from .bark import BarkNotifier
from .local import JsonlNotifier


def get_notifier(settings: Optional[Settings] = None) -> BaseNotifier:
    """Bark when a device key is configured, otherwise the local JSONL channel."""
    settings = settings or get_settings()
    if settings.bark.device_key:
        return BarkNotifier(settings.bark)
    return JsonlNotifier(settings.notify.out_dir)


__all__ = [
    "BaseNotifier",
    "BarkNotifier",
    "JsonlNotifier",
    "get_notifier",
]
