"""
Internal helpers shared within the cache package.

This module provides logging utilities that summarize cached message bodies.
The functions are prefixed with underscores to signal that they are not part
of the public API.
"""

import textwrap

_TEXT_FIELDS = ("text", "caption", "fileName", "displayName")


def _body_summary(kind: str, value, *, width: int = 20) -> str:
    """Return a compact one-line summary for logs: e.g., conversation:'Hello…'."""
    if isinstance(value, str):
        text = value
    elif isinstance(value, dict):
        text = next((value[f] for f in _TEXT_FIELDS if value.get(f)), "")
    else:
        text = ""
    if not text:
        return kind
    return f"{kind}:'{textwrap.shorten(str(text), width=width, placeholder='…')}'"


def _body_preview(body, *, width_each: int = 20, max_total_chars: int = 200) -> str:
    """Join summaries of each body field and cap total length to avoid noisy logs."""
    parts = []
    total = 0
    for kind, value in (body or {}).items():
        s = _body_summary(kind, value, width=width_each)
        # Once the preview budget is spent, bail early with an ellipsis marker.
        if total + len(s) + (2 if parts else 0) > max_total_chars:
            parts.append("…")
            break
        parts.append(s)
        total += len(s) + (2 if parts else 0)
    return ", ".join(parts)
