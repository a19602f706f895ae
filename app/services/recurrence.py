"""
Recurrence & Notification Engine
Computes next due dates for recurring expenses and derives the reminder
notifications shown in the dashboard bell.

Everything here is pure: callers pass in the expenses, "today" and the
read-state, and get fresh values back.
"""
import calendar
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Set, Union

from app.models.expense import Expense
from app.models.notification import Notification

CURRENCY_SYMBOL = "₹"
DEFAULT_REMINDER_DAYS = 3
DEFAULT_INTERVAL = "monthly"

INTERVAL_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
}

SHORT_MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

DateLike = Union[date, datetime, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def normalize_interval(interval: Optional[str]) -> str:
    """Return a known interval name; anything unrecognised is monthly."""
    if interval in INTERVAL_MONTHS:
        return interval
    return DEFAULT_INTERVAL


def add_months(base: date, months: int) -> date:
    """Calendar-aware month addition, clamping the day to the target month's length."""
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_next_due_date(
    base_date: DateLike,
    interval: Optional[str] = None,
    today: Optional[date] = None,
) -> date:
    """
    Next occurrence of `base_date` repeated every `interval` that falls
    strictly after today.

    Occurrences are `base_date + k * step` months for k >= 0, each computed
    from the base date so month-end days do not drift (Jan 31 -> Feb 28 ->
    Mar 31). A base date already in the future is returned unchanged.
    """
    base = _as_date(base_date)
    today = today or date.today()
    step = INTERVAL_MONTHS[normalize_interval(interval)]

    if base > today:
        return base

    elapsed_months = (today.year - base.year) * 12 + (today.month - base.month)
    k = elapsed_months // step
    candidate = add_months(base, k * step)
    # k * step months never passes today's month, so this runs at most once
    while candidate <= today:
        k += 1
        candidate = add_months(base, k * step)
    return candidate


def format_amount(amount: float) -> str:
    """Thousands separators, up to three decimals, trailing zeros dropped."""
    return f"{amount:,.3f}".rstrip("0").rstrip(".")


def _expense_notification(
    expense: Expense,
    today: date,
    now: datetime,
    default_reminder_days: int,
) -> Optional[Notification]:
    if not expense.recurring or expense.next_due_date is None:
        return None

    days_until_due = (expense.next_due_date - today).days
    reminder_days = expense.reminder_days_before
    if reminder_days is None:
        reminder_days = default_reminder_days
    amount_text = f"{CURRENCY_SYMBOL}{format_amount(expense.amount)}"

    if days_until_due < 0:
        return Notification(
            id=f"overdue-{expense.id}",
            expense_id=expense.id,
            kind="overdue",
            title=f"{expense.name} is overdue",
            message=f"Payment of {amount_text} was due {abs(days_until_due)} day(s) ago",
            amount=expense.amount,
            due_date=expense.next_due_date,
            created_at=now,
        )

    if days_until_due <= reminder_days:
        when = "today" if days_until_due == 0 else f"in {days_until_due} day(s)"
        interval_name = normalize_interval(expense.recurring_interval).capitalize()
        return Notification(
            id=f"due-{expense.id}",
            expense_id=expense.id,
            kind="due_soon",
            title=f"{expense.name} due {when}",
            message=f"{interval_name} payment of {amount_text} due {when}",
            amount=expense.amount,
            due_date=expense.next_due_date,
            created_at=now,
        )

    return None


def _monthly_summary(expenses: List[Expense], today: date, now: datetime) -> Optional[Notification]:
    month_expenses = [
        e for e in expenses
        if e.date.year == today.year and e.date.month == today.month
    ]
    total = sum(e.amount for e in month_expenses)
    if total <= 0:
        return None

    month_index = today.month - 1
    return Notification(
        id=f"monthly-{month_index}-{today.year}",
        expense_id=None,
        kind="monthly_summary",
        title=f"{SHORT_MONTH_NAMES[month_index]} {today.year} Expense Summary",
        message=(
            f"Total expenses: {CURRENCY_SYMBOL}{format_amount(total)} "
            f"across {len(month_expenses)} transactions"
        ),
        amount=total,
        created_at=now,
    )


def generate_notifications(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
    now: Optional[datetime] = None,
    default_reminder_days: int = DEFAULT_REMINDER_DAYS,
) -> List[Notification]:
    """
    Derive overdue / due-soon reminders for recurring expenses plus one
    summary for the current month.

    Notifications come back in expense order with the summary last, all
    unread. Read-state is reattached separately with `apply_read_state`.
    """
    today = today or date.today()
    now = now or datetime.now(timezone.utc)
    expenses = list(expenses)

    notifications: List[Notification] = []
    for expense in expenses:
        notification = _expense_notification(expense, today, now, default_reminder_days)
        if notification is not None:
            notifications.append(notification)

    summary = _monthly_summary(expenses, today, now)
    if summary is not None:
        notifications.append(summary)
    return notifications


def apply_read_state(notifications: Iterable[Notification], read_ids: Set[str]) -> List[Notification]:
    """Copies of `notifications` with `read` looked up by id."""
    return [n.model_copy(update={"read": n.id in read_ids}) for n in notifications]
