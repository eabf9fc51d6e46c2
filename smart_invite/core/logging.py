import logging
from typing import Optional

from .config import LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

logger = logging.getLogger("smart_invite")


def log_evt(level: str, action: str, event_id: Optional[int] = None, guest_id: Optional[int] = None, **kw):
    """One ``action=... key=value`` line per event or guest change.

    ``None`` values are left out, so callers can pass optional ids freely.
    """
    parts = [f"action={action}"]
    if event_id is not None:
        parts.append(f"event_id={event_id}")
    if guest_id is not None:
        parts.append(f"guest_id={guest_id}")
    for k, v in kw.items():
        if v is None:
            continue
        parts.append(f"{k}={v}")
    msg = " ".join(parts)

    lvl = level.lower()
    if lvl == "debug":
        logger.debug(msg)
    elif lvl == "warning":
        logger.warning(msg)
    elif lvl == "error":
        logger.error(msg)
    else:
        logger.info(msg)
