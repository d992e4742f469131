import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from fastapi import Header

from src.config import settings
from src.exceptions import AdminUnauthorized

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AdminContext:
    """Proof that the caller presented the admin key.

    Admin handlers take this as an explicit argument; it can only be obtained
    through ``require_admin``.
    """
    authenticated_at: datetime

def require_admin(x_admin_key: Optional[str] = Header(default=None)) -> AdminContext:
    """Check the X-Admin-Key header against ADMIN_SECRET_KEY"""

    expected = settings.ADMIN_SECRET_KEY
    if not expected:
        logger.error("ADMIN_SECRET_KEY is not configured; rejecting admin request")
        raise AdminUnauthorized()

    if not x_admin_key or not secrets.compare_digest(x_admin_key.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Rejected admin request with missing or invalid X-Admin-Key")
        raise AdminUnauthorized()

    return AdminContext(authenticated_at=datetime.now())
