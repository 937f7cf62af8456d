import hmac
import logging
import os
from typing import Optional

from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)

def check_internal_key(x_internal_key: Optional[str]) -> None:
    # read per request so the secret can rotate without a restart
    secret = os.getenv("INTERNAL_SERVICE_SECRET")

    if not secret:
        logger.error("INTERNAL_SERVICE_SECRET is not set; rejecting write request")
        raise HTTPException(
            status_code=500,
            detail="Internal service secret not configured."
        )

    if not x_internal_key or not hmac.compare_digest(x_internal_key.encode(), secret.encode()):
        logger.warning("rejected request with a missing or bad internal service key")
        raise HTTPException(
            status_code=401,
            detail="Unauthorized service call."
        )

def verify_internal_service(x_internal_key: str = Header(...)):
    check_internal_key(x_internal_key)
