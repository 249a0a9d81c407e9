# src/hosttest/telemetry/logger/processors.py

"""
Custom structlog processors used by the console and file renderers.
"""

import logging
from typing import Any

from structlog.typing import EventDict, WrappedLogger

LOG_EMOJIS: dict[int | str, str] = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
    "resolve": "🔎",
    "launch": "🚀",
    "exit": "🏁",
    "fail": "🚫",
    "success": "🎉",
}

# Keys only meaningful while building the event; never rendered.
_EXTRA_KEYS = ("emoji_key",)


def add_emoji_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefix the event with an emoji picked from `emoji_key` or the log level."""
    emoji_key: Any = event_dict.get("emoji_key")
    emoji = LOG_EMOJIS.get(emoji_key) if emoji_key else None
    if emoji is None:
        level = logging.getLevelName(str(event_dict.get("level", "info")).upper())
        emoji = LOG_EMOJIS.get(level, "")
    if emoji and isinstance(event_dict.get("event"), str):
        event_dict["event"] = f"{emoji} {event_dict['event']}"
    return event_dict


def remove_extra_keys_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key in _EXTRA_KEYS:
        event_dict.pop(key, None)
    return event_dict
