# backend/app/services/analytics_service.py
"""
Analytics Service
Aggregation pipelines behind the dashboard KPI cards, revenue/GST chart,
daily income widget, expense breakdown and employee performance table
"""
import asyncio
import calendar
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.db import get_collection

EMPLOYEE_ROLE = "Employee"
COMPLETED_STATUS = "Completed"


def _convert_to_date(field: str) -> Dict[str, Any]:
    # string dates, real dates and missing dates all end up as date-or-null
    return {"$convert": {"input": field, "to": "date", "onError": None, "onNull": None}}


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First instant and last second of a month (UTC). Month 0 means December of the previous year."""
    if month < 1:
        year, month = year - 1, month + 12
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc)
    return start, end


def percentage_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def invoice_totals_pipeline(start: datetime, end: datetime) -> List[Dict[str, Any]]:
    return [
        {"$addFields": {"real_date": _convert_to_date("$payment_date")}},
        {"$match": {"is_paid": True, "real_date": {"$gte": start, "$lte": end}}},
        {
            "$group": {
                "_id": None,
                "revenue": {"$sum": "$total_amount"},
                "gst": {
                    "$sum": {
                        "$add": [
                            {"$ifNull": ["$cgst_amount", 0]},
                            {"$ifNull": ["$sgst_amount", 0]},
                        ]
                    }
                },
            }
        },
    ]


def expense_totals_pipeline(start: datetime, end: datetime) -> List[Dict[str, Any]]:
    return [
        {"$addFields": {"real_date": _convert_to_date("$date")}},
        {"$match": {"real_date": {"$gte": start, "$lte": end}}},
        {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
    ]


def revenue_chart_pipeline(year: int) -> List[Dict[str, Any]]:
    start = datetime(year, 1, 1, tzinfo=timezone.utc)
    end = datetime(year, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    return [
        {"$addFields": {"real_date": _convert_to_date("$payment_date")}},
        {"$match": {"is_paid": True, "real_date": {"$gte": start, "$lte": end}}},
        {
            "$group": {
                "_id": {"month": {"$month": "$real_date"}, "year": {"$year": "$real_date"}},
                "base_amount": {"$sum": "$amount"},
                "gst": {
                    "$sum": {
                        "$add": [
                            {"$ifNull": ["$cgst_amount", 0]},
                            {"$ifNull": ["$sgst_amount", 0]},
                        ]
                    }
                },
            }
        },
        {"$sort": {"_id.year": 1, "_id.month": 1}},
    ]


def expense_breakdown_pipeline() -> List[Dict[str, Any]]:
    return [
        {"$group": {"_id": "$category", "value": {"$sum": "$amount"}}},
        {"$project": {"_id": 0, "name": "$_id", "value": 1}},
        {"$sort": {"value": -1}},
    ]


def employee_performance_pipeline(start: datetime, end: datetime) -> List[Dict[str, Any]]:
    """Employees joined with their completed tasks in [start, end], ranked by profit over salary."""
    return [
        {"$match": {"role": EMPLOYEE_ROLE}},
        {
            "$lookup": {
                "from": "tasks",
                "let": {"emp_username": "$username"},
                "pipeline": [
                    {
                        "$addFields": {
                            "real_date": _convert_to_date("$work_given_date"),
                            "numeric_amount": {
                                "$convert": {
                                    "input": "$payment_amount",
                                    "to": "double",
                                    "onError": 0,
                                    "onNull": 0,
                                }
                            },
                        }
                    },
                    {
                        "$match": {
                            "$expr": {
                                "$and": [
                                    {"$eq": ["$employee_id", "$$emp_username"]},
                                    {"$eq": ["$task_status", COMPLETED_STATUS]},
                                    {"$gte": ["$real_date", start]},
                                    {"$lte": ["$real_date", end]},
                                ]
                            }
                        }
                    },
                ],
                "as": "monthly_tasks",
            }
        },
        {
            "$project": {
                "_id": 0,
                "username": "$username",
                "role": "$role",
                "salary": {"$ifNull": ["$salary", 0]},
                "tasks_completed": {"$size": "$monthly_tasks"},
                "total_work_value": {"$sum": "$monthly_tasks.numeric_amount"},
            }
        },
        {"$addFields": {"difference": {"$subtract": ["$total_work_value", "$salary"]}}},
        {"$sort": {"difference": -1}},
    ]


class AnalyticsService:
    """
    Runs the dashboard aggregation pipelines.
    Each method is a single pass over the relevant collections.
    """

    def __init__(self):
        self.invoices = get_collection("invoices")
        self.expenses = get_collection("expenses")
        self.employees = get_collection("employees")

    async def _aggregate(self, collection, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        cursor = collection.aggregate(pipeline)
        return await cursor.to_list(length=None)

    async def _totals_for_range(self, start: datetime, end: datetime) -> Dict[str, float]:
        invoice_rows, expense_rows = await asyncio.gather(
            self._aggregate(self.invoices, invoice_totals_pipeline(start, end)),
            self._aggregate(self.expenses, expense_totals_pipeline(start, end)),
        )
        revenue = invoice_rows[0].get("revenue", 0) if invoice_rows else 0
        gst = invoice_rows[0].get("gst", 0) if invoice_rows else 0
        expenses = expense_rows[0].get("total", 0) if expense_rows else 0
        return {
            "revenue": revenue,
            "gst": gst,
            "expenses": expenses,
            "profit": revenue - gst - expenses,
        }

    async def get_kpis(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """This month's revenue, GST, expenses and profit with change against last month."""
        now = now or datetime.now(timezone.utc)
        current, last = await asyncio.gather(
            self._totals_for_range(*month_bounds(now.year, now.month)),
            self._totals_for_range(*month_bounds(now.year, now.month - 1)),
        )
        return {
            "total_revenue": current["revenue"],
            "total_gst": current["gst"],
            "total_expenses": current["expenses"],
            "net_profit": current["profit"],
            "revenue_change": percentage_change(current["revenue"], last["revenue"]),
            "gst_change": percentage_change(current["gst"], last["gst"]),
            "expense_change": percentage_change(current["expenses"], last["expenses"]),
            "profit_change": percentage_change(current["profit"], last["profit"]),
        }

    async def get_revenue_chart(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Twelve monthly points for the current year; months without invoices are zero."""
        now = now or datetime.now(timezone.utc)
        rows = await self._aggregate(self.invoices, revenue_chart_pipeline(now.year))
        by_month = {row["_id"]["month"]: row for row in rows}

        chart = []
        for month in range(1, 13):
            found = by_month.get(month)
            base_amount = found.get("base_amount", 0) if found else 0
            gst = found.get("gst", 0) if found else 0
            chart.append({
                "month": calendar.month_abbr[month],
                "base_amount": base_amount,
                "gst": gst,
                "revenue": base_amount + gst,
            })
        return chart

    async def get_daily_income(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        current, last = await asyncio.gather(
            self._aggregate(self.invoices, invoice_totals_pipeline(*month_bounds(now.year, now.month))),
            self._aggregate(self.invoices, invoice_totals_pipeline(*month_bounds(now.year, now.month - 1))),
        )
        current_total = current[0].get("revenue", 0) if current else 0
        last_total = last[0].get("revenue", 0) if last else 0
        days_elapsed = max(now.day, 1)

        return {
            "average_daily": math.floor(current_total / days_elapsed + 0.5),
            "current_month": calendar.month_name[now.month],
            "days_elapsed": days_elapsed,
            "total_this_month": current_total,
            "change_from_last_month": percentage_change(current_total, last_total),
        }

    async def get_expense_breakdown(self) -> List[Dict[str, Any]]:
        """Expense totals per category, largest first."""
        return await self._aggregate(self.expenses, expense_breakdown_pipeline())

    async def get_employee_performance(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        now = now or datetime.now(timezone.utc)
        start, end = month_bounds(now.year, now.month)
        return await self._aggregate(self.employees, employee_performance_pipeline(start, end))


analytics_service = AnalyticsService()
