"""Shared FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leave_backend.database import get_db
from leave_backend.special_leave.service import SpecialLeaveService


async def get_special_leave_service(
    db: AsyncSession = Depends(get_db),
) -> SpecialLeaveService:
    """Build a request-scoped service over the SQL record stores."""
    return SpecialLeaveService.from_session(db)
