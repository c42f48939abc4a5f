"""JSON envelopes for API responses."""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def create_success_envelope(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Create success envelope around payload."""
    logger.debug("Creating success envelope")
    return {"ok": True, "data": payload}


def create_error_envelope(
    error_code: str, error_message: str, details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create error envelope."""
    logger.debug("Creating error envelope", extra={"code": error_code})
    error_data = {
        "code": error_code,
        "message": error_message,
    }
    if details:
        error_data["details"] = details

    return {"ok": False, "error": error_data}
