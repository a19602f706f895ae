"""Expense models for the expense tracker and recurring reminders."""
from datetime import date as Date, datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

ExpenseCategory = Literal[
    "Subscription",
    "Courier",
    "Utilities",
    "Office Supplies",
    "Marketing",
    "Travel",
    "Maintenance",
    "Other",
]

EXPENSE_CATEGORIES: List[str] = [
    "Subscription",
    "Courier",
    "Utilities",
    "Office Supplies",
    "Marketing",
    "Travel",
    "Maintenance",
    "Other",
]

RecurringInterval = Literal["monthly", "quarterly", "yearly"]


class Expense(BaseModel):
    """Expense document as stored in the `expenses` collection."""
    id: str = Field(alias="_id")
    name: str
    category: ExpenseCategory
    amount: float = Field(..., ge=0)
    date: Date
    description: Optional[str] = None
    recurring: bool = False
    # Stored values are not checked against RecurringInterval; unknown
    # intervals behave as monthly.
    recurring_interval: Optional[str] = None
    reminder_enabled: bool = False
    reminder_days_before: Optional[int] = Field(default=None, ge=0)
    next_due_date: Optional[Date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("date", "next_due_date", mode="before")
    @classmethod
    def strip_time(cls, value):
        # Mongo hands dates back as midnight datetimes
        if isinstance(value, datetime):
            return value.date()
        return value

    class Config:
        populate_by_name = True
        from_attributes = True
        json_encoders = {
            datetime: lambda v: v.isoformat(),
            Date: lambda v: v.isoformat(),
        }


class ExpenseCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: ExpenseCategory
    amount: float = Field(..., ge=0)
    date: Date = Field(default_factory=Date.today)
    description: Optional[str] = None
    recurring: bool = False
    recurring_interval: Optional[RecurringInterval] = None
    reminder_enabled: bool = False
    reminder_days_before: Optional[int] = Field(default=None, ge=0)


class ExpenseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[ExpenseCategory] = None
    amount: Optional[float] = Field(default=None, ge=0)
    date: Optional[Date] = None
    description: Optional[str] = None
    recurring: Optional[bool] = None
    recurring_interval: Optional[RecurringInterval] = None
    reminder_enabled: Optional[bool] = None
    reminder_days_before: Optional[int] = Field(default=None, ge=0)


class MonthlyReport(BaseModel):
    """Per-month expense roll-up used by the monthly report view."""
    month: str
    year: int
    total: float
    by_category: Dict[str, float]
    expenses: List[Expense]
