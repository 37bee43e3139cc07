# Overview: Human-readable order tracking identifiers.

from __future__ import annotations

import secrets
from datetime import datetime

from ..time_utils import utc_datestamp

TRACKING_ID_PREFIX = "PRCL"


def generate_tracking_id(now: datetime | None = None) -> str:
    """
    PRCL-YYYYMMDD-XXXXXX

    The date is the UTC calendar date; the suffix is 3 bytes from the OS
    CSPRNG rendered as upper-case hex, so ids are neither sequential nor
    guessable. Uniqueness is checked by the caller against the store.
    """
    return f"{TRACKING_ID_PREFIX}-{utc_datestamp(now)}-{secrets.token_hex(3).upper()}"
