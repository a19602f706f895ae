"""
Expense Service
CRUD for expenses plus the monthly report and recurring-expense helpers
"""
import calendar
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
import logging
from bson import ObjectId
from pydantic import ValidationError

from app.config import _now_utc
from app.db import get_collection
from app.models.expense import EXPENSE_CATEGORIES, Expense, ExpenseCreate, ExpenseUpdate, MonthlyReport
from app.services.recurrence import calculate_next_due_date

logger = logging.getLogger(__name__)

DATE_FIELDS = ("date", "next_due_date")
# Fields an update may set but never clear
REQUIRED_FIELDS = ("name", "category", "amount", "date", "recurring", "reminder_enabled")


def to_storage_datetime(value: date) -> datetime:
    """BSON has no date type; dates are kept as midnight UTC."""
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _to_document(data: Dict[str, Any]) -> Dict[str, Any]:
    doc = dict(data)
    for field in DATE_FIELDS:
        value = doc.get(field)
        if isinstance(value, date) and not isinstance(value, datetime):
            doc[field] = to_storage_datetime(value)
    return doc


def month_range(month: int, year: int):
    """[start, end) datetimes covering a calendar month (month is 1-12)."""
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


class ExpenseService:
    """Service for managing expenses in the `expenses` collection."""

    def __init__(self):
        self.collection = get_collection("expenses")

    async def list_expenses(self) -> List[Expense]:
        """All expenses, newest first."""
        cursor = self.collection.find({}).sort("date", -1)
        docs = await cursor.to_list(length=None)
        return [Expense(**doc) for doc in docs]

    async def get_expense(self, expense_id: str) -> Expense:
        doc = await self.collection.find_one({"_id": expense_id})
        if not doc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Expense not found",
            )
        return Expense(**doc)

    async def create_expense(self, expense_data: ExpenseCreate, today: Optional[date] = None) -> Expense:
        """Insert an expense, deriving next_due_date for recurring ones."""
        now = _now_utc()
        payload = expense_data.model_dump()
        if expense_data.recurring:
            payload["next_due_date"] = calculate_next_due_date(
                expense_data.date, expense_data.recurring_interval, today=today
            )
        else:
            payload["next_due_date"] = None

        payload["_id"] = str(ObjectId())
        payload["created_at"] = now
        payload["updated_at"] = now

        try:
            await self.collection.insert_one(_to_document(payload))
        except Exception as exc:
            logger.exception(f"Error creating expense: {exc}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create expense",
            ) from exc

        logger.info(f"Created expense {payload['_id']} ({expense_data.name})")
        return Expense(**payload)

    async def update_expense(
        self,
        expense_id: str,
        update_data: ExpenseUpdate,
        today: Optional[date] = None,
    ) -> Expense:
        """
        Partial update. next_due_date is recomputed when the schedule
        (date, interval or recurring flag) changes on a recurring expense,
        and cleared when the expense stops recurring.
        """
        updates = update_data.model_dump(exclude_unset=True)
        if not updates:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No fields to update",
            )

        cleared = [field for field in REQUIRED_FIELDS if field in updates and updates[field] is None]
        if cleared:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Fields cannot be null: {', '.join(cleared)}",
            )

        current = await self.get_expense(expense_id)
        try:
            merged = Expense.model_validate(
                current.model_copy(update=updates).model_dump(by_alias=True)
            )
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid expense update: {exc.errors()[0]['msg']}",
            ) from exc

        unset: Dict[str, str] = {}
        schedule_changed = any(k in updates for k in ("date", "recurring_interval", "recurring"))
        if not merged.recurring:
            if current.next_due_date is not None:
                unset["next_due_date"] = ""
        elif schedule_changed or merged.next_due_date is None:
            updates["next_due_date"] = calculate_next_due_date(
                merged.date, merged.recurring_interval, today=today
            )

        updates["updated_at"] = _now_utc()
        operation: Dict[str, Any] = {"$set": _to_document(updates)}
        if unset:
            operation["$unset"] = unset

        try:
            result = await self.collection.update_one({"_id": expense_id}, operation)
        except Exception as exc:
            logger.exception(f"Error updating expense {expense_id}: {exc}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update expense",
            ) from exc

        if result.matched_count == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Expense not found",
            )

        return await self.get_expense(expense_id)

    async def delete_expense(self, expense_id: str) -> None:
        result = await self.collection.delete_one({"_id": expense_id})
        if result.deleted_count == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Expense not found",
            )
        logger.info(f"Deleted expense {expense_id}")

    async def get_monthly_report(self, month: int, year: int) -> MonthlyReport:
        """Totals for one calendar month, overall and per category (month is 1-12)."""
        if not 1 <= month <= 12:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Month must be between 1 and 12",
            )

        start, end = month_range(month, year)
        cursor = self.collection.find({"date": {"$gte": start, "$lt": end}}).sort("date", -1)
        docs = await cursor.to_list(length=None)
        expenses = [Expense(**doc) for doc in docs]

        by_category = {category: 0.0 for category in EXPENSE_CATEGORIES}
        for expense in expenses:
            by_category[expense.category] += expense.amount

        return MonthlyReport(
            month=calendar.month_name[month],
            year=year,
            total=sum(e.amount for e in expenses),
            by_category=by_category,
            expenses=expenses,
        )

    async def get_total_expenses(self) -> float:
        cursor = self.collection.aggregate([
            {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
        ])
        rows = await cursor.to_list(length=None)
        return rows[0]["total"] if rows else 0

    async def get_upcoming_recurring_expenses(self) -> List[Expense]:
        """Recurring expenses with a due date, soonest first."""
        cursor = self.collection.find(
            {"recurring": True, "next_due_date": {"$ne": None}}
        ).sort("next_due_date", 1)
        docs = await cursor.to_list(length=None)
        return [Expense(**doc) for doc in docs]


expense_service = ExpenseService()
