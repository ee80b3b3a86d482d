import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_logger = logging.getLogger("audit")


def _email_hash(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    h = hashlib.sha256(email.lower().encode()).hexdigest()
    return h[:12]


def audit(event: str, *, shop: Optional[str] = None, email: Optional[str] = None, **fields: Any) -> None:
    """Emit a single JSON line on the audit logger.

    Customer emails are hashed; never pass access tokens here.
    """
    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
    }
    if shop:
        payload["shop"] = shop
    if email:
        payload["email_hash"] = _email_hash(email)
    if fields:
        payload.update(fields)
    _logger.info(json.dumps(payload, ensure_ascii=False, default=str))
