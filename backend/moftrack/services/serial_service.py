# Overview: MOF serial number generation.

"""
Serial numbers are printed as QR codes on the MOF and scanned by pickers,
so they must be unique across every MOF ever created.

FORMAT: <prefix>-<UTC yyyymmddHHMMSS>-<6 random hex chars>

The time part keeps numbers roughly sortable; the random part makes two
MOFs created in the same second collide with probability ~1 in 16 million.
The unique constraint on mofs.serial_number is the actual guarantee:
lifecycle_service.create_mof retries with a fresh number on IntegrityError.
"""

from __future__ import annotations

import secrets

from flask import current_app

from moftrack.time_utils import utcnow


def generate_mof_serial(prefix: str | None = None) -> str:
    if prefix is None:
        prefix = current_app.config.get("MOF_SERIAL_PREFIX", "MOF")
    stamp = utcnow().strftime("%Y%m%d%H%M%S")
    return f"{prefix}-{stamp}-{secrets.token_hex(3).upper()}"
