"""Commitment pool constants."""

from __future__ import annotations

REASON_DUPLICATE = "duplicate"
REASON_CLOSED = "closed"

PIN_NAME = "ZKPin"
MAX_TITLE_LENGTH = 256
