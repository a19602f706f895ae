"""Notification models for expense reminders."""
from datetime import date as Date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

NotificationKind = Literal["overdue", "due_soon", "monthly_summary"]


class Notification(BaseModel):
    """Derived notification; regenerated from expenses, never stored."""
    id: str = Field(..., description="Deterministic id (kind + expense id, or month + year)")
    expense_id: Optional[str] = None
    kind: NotificationKind
    title: str
    message: str
    amount: Optional[float] = None
    due_date: Optional[Date] = None
    read: bool = False
    created_at: datetime

    class Config:
        populate_by_name = True
        from_attributes = True
        json_encoders = {
            datetime: lambda v: v.isoformat(),
        }


class NotificationRead(BaseModel):
    """Read-state entry persisted in `notification_reads`, keyed by notification id."""
    id: str = Field(alias="_id")
    read: bool = True
    read_at: datetime

    class Config:
        populate_by_name = True
