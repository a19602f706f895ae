"""
Notification Service
Regenerates expense notifications and keeps the per-id read-state
"""
from datetime import date
from typing import List, Optional, Set
import logging

from app.config import _now_utc, settings
from app.db import get_collection
from app.models.notification import Notification, NotificationRead
from app.services.expense_service import expense_service
from app.services.recurrence import apply_read_state, generate_notifications

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Notifications are never stored. Every call rebuilds them from the
    current expenses; only the read flag, keyed by notification id, lives
    in the `notification_reads` collection.
    """

    def __init__(self):
        self.read_collection = get_collection("notification_reads")

    async def get_read_ids(self) -> Set[str]:
        cursor = self.read_collection.find({"read": True}, {"_id": 1})
        docs = await cursor.to_list(length=None)
        return {doc["_id"] for doc in docs}

    async def list_notifications(self, today: Optional[date] = None) -> List[Notification]:
        expenses = await expense_service.list_expenses()
        generated = generate_notifications(
            expenses,
            today=today,
            default_reminder_days=settings.default_reminder_days,
        )
        read_ids = await self.get_read_ids()
        return apply_read_state(generated, read_ids)

    async def mark_read(self, notification_id: str) -> None:
        entry = NotificationRead(_id=notification_id, read=True, read_at=_now_utc())
        await self.read_collection.update_one(
            {"_id": notification_id},
            {"$set": entry.model_dump(exclude={"id"})},
            upsert=True,
        )

    async def mark_all_read(self, today: Optional[date] = None) -> int:
        """Mark every currently generated notification read; returns how many."""
        notifications = await self.list_notifications(today=today)
        for notification in notifications:
            await self.mark_read(notification.id)
        logger.info(f"Marked {len(notifications)} notifications read")
        return len(notifications)

    async def get_unread_count(self, today: Optional[date] = None) -> int:
        notifications = await self.list_notifications(today=today)
        return sum(1 for n in notifications if not n.read)


notification_service = NotificationService()
