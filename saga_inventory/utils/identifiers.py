"""Application-side id and timestamp generation."""
import secrets
import time
import uuid
from datetime import datetime


def new_id() -> str:
    """Collision-resistant opaque id: 32 lowercase hex characters."""
    return uuid.uuid4().hex


def epoch_now() -> int:
    """Current time as integer epoch seconds."""
    return int(time.time())


def new_receipt_number(now: datetime = None) -> str:
    """Human-facing receipt number, e.g. RCP-20261019-4F09A2."""
    now = now or datetime.now()
    return f"RCP-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"
