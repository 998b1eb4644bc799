"""
Care Reminder Service

Turns overdue care steps into a single daily reminder and hands it to a
scheduler. The scheduling core owns no notification state: every refresh
cancels the pending reminder and, when something is overdue, schedules a new
one built from the current due-date queries.
"""

import logging
from typing import List, Optional, Tuple

from plantcare.core.config import get_settings
from plantcare.notifications.content import CareReminderContent
from plantcare.notifications.models import DailyReminder
from plantcare.plants.models import CareStep, Plant

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Delivery side of reminders (device notifications, push, ...)."""

    async def schedule(self, reminder: DailyReminder) -> None:
        raise NotImplementedError

    async def cancel(self, identifier: str) -> None:
        raise NotImplementedError


class LoggingReminderScheduler(ReminderScheduler):
    """Scheduler that only records what would be delivered."""

    def __init__(self):
        self.pending: dict = {}

    async def schedule(self, reminder: DailyReminder) -> None:
        self.pending[reminder.identifier] = reminder
        logger.info(
            f"Scheduled reminder {reminder.identifier} at "
            f"{reminder.hour:02d}:{reminder.minute:02d}: {reminder.body}"
        )

    async def cancel(self, identifier: str) -> None:
        if self.pending.pop(identifier, None) is not None:
            logger.info(f"Cancelled reminder {identifier}")


class ReminderService:
    """Builds and (re)schedules the daily plant care reminder."""

    REMINDER_ID = "daily-plant-care-reminder"

    def __init__(self, scheduler: Optional[ReminderScheduler] = None):
        self.scheduler = scheduler or LoggingReminderScheduler()

    @classmethod
    def build_reminder(cls, overdue: List[Tuple[Plant, CareStep]]) -> Optional[DailyReminder]:
        """Reminder for the given overdue steps, or None when nothing is overdue."""
        if not overdue:
            return None
        settings = get_settings()
        return DailyReminder(
            identifier=cls.REMINDER_ID,
            title=CareReminderContent.TITLE,
            body=CareReminderContent.body(overdue),
            badge=len(overdue),
            hour=settings.REMINDER_HOUR,
            minute=settings.REMINDER_MINUTE,
        )

    async def update_daily_reminders(self, overdue: List[Tuple[Plant, CareStep]]) -> Optional[DailyReminder]:
        """
        Replace the pending reminder.

        Call whenever care steps are completed or plant data changes.
        """
        await self.scheduler.cancel(self.REMINDER_ID)
        reminder = self.build_reminder(overdue)
        if reminder is None:
            return None
        await self.scheduler.schedule(reminder)
        return reminder
