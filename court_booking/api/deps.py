"""Shared API dependencies."""
import logging
from typing import NoReturn, Optional

from fastapi import Header, HTTPException
from pydantic import BaseModel

from court_booking.core.exceptions import BookingError

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    """Caller identity, as asserted by the authentication layer in front of us."""

    user_id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> CurrentUser:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return CurrentUser(user_id=x_user_id, role=x_user_role or "user")


def raise_booking_error(error: BookingError) -> NoReturn:
    """Translate a domain error into an HTTP error the booking UI can branch on."""
    raise HTTPException(status_code=error.status_code, detail=error.to_detail())


def raise_unexpected(action: str, error: Exception) -> NoReturn:
    logger.error(f"Failed to {action}: {error}", exc_info=True)
    raise HTTPException(status_code=500, detail=f"Failed to {action}: {str(error)}")
