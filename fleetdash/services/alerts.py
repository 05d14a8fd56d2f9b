"""Compliance notifications (the bell and the alerts page)."""
from __future__ import annotations

from typing import List

from fleetdash.data.api_client import unwrap
from fleetdash.domain.models import Alert, NotificationFeed
from fleetdash.domain.rules import notification_to_alert
from fleetdash.infra.exceptions import FleetDashException
from fleetdash.infra.logging import get_logger
from fleetdash.services.base import BaseService

logger = get_logger(__name__)

ALERTS_PATH = "/compliance/dashboard/alerts"


class AlertsService(BaseService):
    """
    Read paths degrade to an empty feed so a broken alerts endpoint never blanks
    the page around the bell; write paths log and re-raise.
    """

    async def get_notifications(self, unread_only: bool = True) -> NotificationFeed:
        try:
            payload = await self.client.get(ALERTS_PATH, params={"unread_only": unread_only})
        except FleetDashException as e:
            logger.error(f"Failed to fetch notifications: {e.message}")
            return NotificationFeed.empty()
        return NotificationFeed.from_dict(payload)

    async def get_alerts(self, limit: int = 10) -> List[Alert]:
        """Unread notifications in the legacy alert shape, newest first as served."""
        feed = await self.get_notifications(unread_only=True)
        if not feed.success:
            return []
        return [notification_to_alert(n) for n in feed.notifications][:limit]

    async def mark_as_read(self, notification_id: str) -> None:
        try:
            await self.client.post(f"{ALERTS_PATH}/mark-as-read", {"notification_id": notification_id})
        except FleetDashException as e:
            logger.error(f"Failed to mark notification {notification_id} as read: {e.message}")
            raise

    async def mark_all_as_read(self) -> int:
        try:
            payload = await self.client.post(f"{ALERTS_PATH}/mark-all-as-read")
        except FleetDashException as e:
            logger.error(f"Failed to mark all notifications as read: {e.message}")
            raise
        data = unwrap(payload, default={})
        return int(data.get("marked_count") or 0) if isinstance(data, dict) else 0

    async def clear_read_status(self) -> None:
        try:
            await self.client.post(f"{ALERTS_PATH}/clear-read")
        except FleetDashException as e:
            logger.error(f"Failed to clear read status: {e.message}")
            raise
