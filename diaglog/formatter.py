"""Renders one log line from a message and its metadata.

Line layout:

    <Level> [<thread>] <category>: <text>\\n
    <Level> [<thread>]: <text>\\n          (no or default category)

All sizes are counted in encoded bytes, not characters.
"""

from __future__ import annotations

import locale
from typing import NamedTuple

from diaglog.errors import verify
from diaglog.severity import Severity

SUB_CHANNEL_PREFIX = "CDBG"

# Category names that are not rendered. "root" is the stdlib root logger.
DEFAULT_CATEGORIES = frozenset({"", "default", "root"})


class FormattedRecord(NamedTuple):
    data: bytes
    sub_channel: bool


def default_encoding() -> str:
    return locale.getpreferredencoding(False) or "utf-8"


def is_sub_channel(text: str, prefix: str = SUB_CHANNEL_PREFIX) -> bool:
    return bool(prefix) and text.startswith(prefix)


def format_record(
    severity: Severity,
    thread_name: str,
    category: str | None,
    text: str,
    *,
    encoding: str | None = None,
    sub_channel_prefix: str = SUB_CHANNEL_PREFIX,
) -> FormattedRecord:
    """Render a single line and flag sub-channel messages.

    A sub-channel message has its marker and the one delimiter character
    after it stripped from the text.
    """
    encoding = encoding or default_encoding()
    label = Severity(severity).label.encode("ascii")

    sub_channel = is_sub_channel(text, sub_channel_prefix)
    if sub_channel:
        text = text[len(sub_channel_prefix) + 1:]

    thread_bytes = thread_name.encode(encoding, errors="replace")
    text_bytes = text.encode(encoding, errors="replace")

    if category is not None and category not in DEFAULT_CATEGORIES:
        category_bytes = category.encode(encoding, errors="replace")
    else:
        category_bytes = b""

    # label + " [" + "]: " + "\n"
    size = len(label) + 2 + 3 + 1 + len(thread_bytes) + len(text_bytes)
    if category_bytes:
        size += 1 + len(category_bytes)

    parts = [label, b" [", thread_bytes]
    if category_bytes:
        parts += [b"] ", category_bytes, b": "]
    else:
        parts.append(b"]: ")
    parts += [text_bytes, b"\n"]
    data = b"".join(parts)

    verify(len(data) == size, f"formatted size {len(data)} != expected {size}")
    return FormattedRecord(data, sub_channel)
