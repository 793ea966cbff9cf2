# healthtrack/reminder_client.py
"""
Client-side medicine reminders for an open, authenticated session.

Two cancellable interval jobs run while the session holds a token: one polls
the medicines endpoint, the other compares the current minute against each
medicine's time and alerts at most once per (medicine, day, minute). The
dedup tracker, not the poll cycle, decides whether an alert was already
shown. Minutes missed while the process is suspended are not backfilled.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

import httpx
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from . import messages
from .config import settings
from .dedup import DedupKey, DedupTracker
from .notifications import (
    DesktopNotifier, InAppMessenger, LoggingDesktopNotifier, LoggingInAppMessenger,
    NotificationPermission,
)
from .schemas import MedicineResponse
from .timeutils import Clock, format_hhmm, normalize_hhmm

logger = logging.getLogger(__name__)

PERMISSION_PROMPT = (
    "Enable Desktop Notifications? 🔔 We need this to remind you about your medicines "
    "even when you're not on this page."
)


class MedicinesApi:
    """Thin HTTP client for the authenticated user's medicines list."""

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(
            base_url=base_url or settings.API_BASE_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    def list_medicines(self) -> List[MedicineResponse]:
        """
        Fetches the user's active medicines.

        Raises:
            httpx.HTTPError: On connection problems or a non-2xx response.
        """
        response = self._client.get("medicines/", params={"active_only": "true"})
        response.raise_for_status()
        return [MedicineResponse.model_validate(item) for item in response.json()]

    def close(self) -> None:
        self._client.close()


class MedicineReminderWatcher:
    """
    Polls a user's medicines and raises desktop + in-app alerts when a
    medicine's time comes up.
    """

    def __init__(
        self,
        api: MedicinesApi,
        notifier: Optional[DesktopNotifier] = None,
        messenger: Optional[InAppMessenger] = None,
        clock: Clock = datetime.now,
        poll_seconds: Optional[int] = None,
        check_seconds: Optional[int] = None,
        scheduler: Optional[BaseScheduler] = None,
    ):
        self.poll_seconds = poll_seconds or settings.MEDICINE_POLL_SECONDS
        self.check_seconds = check_seconds or settings.REMINDER_CHECK_SECONDS
        if self.check_seconds > 60:
            raise ValueError("check_seconds must be <= 60 or whole minutes can be skipped")

        self.api = api
        self.notifier = notifier or LoggingDesktopNotifier()
        self.messenger = messenger or LoggingInAppMessenger()
        self.clock = clock
        self.notified = DedupTracker(settings.DEDUP_RETENTION_DAYS)

        self._medicines: List[MedicineResponse] = []
        self._lock = threading.Lock()
        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or BackgroundScheduler()
        self._jobs = []

    @property
    def medicines(self) -> List[MedicineResponse]:
        with self._lock:
            return list(self._medicines)

    @property
    def running(self) -> bool:
        return bool(self._jobs)

    def start(self) -> None:
        """Offers the permission prompt, loads medicines and schedules both timers."""
        if self.running:
            return
        self._offer_permission_prompt()
        self.refresh_medicines()
        self.check_reminders()

        self._jobs = [
            self._scheduler.add_job(
                self.refresh_medicines, 'interval', seconds=self.poll_seconds, max_instances=1, coalesce=True
            ),
            self._scheduler.add_job(
                self.check_reminders, 'interval', seconds=self.check_seconds, max_instances=1, coalesce=True
            ),
        ]
        if not self._scheduler.running:
            self._scheduler.start()
        logger.info(f"Medicine reminders started (poll={self.poll_seconds}s, check={self.check_seconds}s)")

    def stop(self) -> None:
        """Cancels both timers. Safe to call more than once."""
        for job in self._jobs:
            try:
                job.remove()
            except JobLookupError:
                pass
        self._jobs = []
        if self._owns_scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            # A shut-down scheduler cannot be started again; the next start() gets a new one
            self._scheduler = BackgroundScheduler()
        logger.info("Medicine reminders stopped")

    def refresh_medicines(self) -> None:
        """Replaces the cached list; on failure the stale list is kept until the next poll."""
        try:
            medicines = self.api.list_medicines()
        except Exception as e:
            logger.error(f"Error fetching medicines for reminders: {e}")
            return
        with self._lock:
            self._medicines = medicines
        logger.debug(f"Fetched {len(medicines)} medicines for reminders")

    def check_reminders(self, now: Optional[datetime] = None) -> int:
        """
        Alerts for every cached medicine due at the current minute that has
        not been alerted yet.

        Returns:
            int: The number of alerts fired by this check.
        """
        fired = 0
        try:
            now = now or self.clock()
            current_time = format_hhmm(now)
            self.notified.prune(now.date())

            for medicine in self.medicines:
                if not medicine.is_active or not medicine.time:
                    continue
                try:
                    due_time = normalize_hhmm(medicine.time)
                except ValueError:
                    logger.warning(f"Ignoring medicine {medicine.id} with invalid time {medicine.time!r}")
                    continue
                if due_time != current_time:
                    continue

                key = DedupKey.for_moment(medicine.id, now)
                if key in self.notified:
                    continue

                logger.info(f"Triggering reminder for {medicine.name} at {current_time}")
                self._alert(medicine)
                self.notified.record(key)
                fired += 1
        except Exception as e:
            logger.exception(f"Error checking medicine reminders: {e}")
        return fired

    def _alert(self, medicine: MedicineResponse) -> None:
        body = messages.medicine_alert_body(medicine.name, medicine.dosage, medicine.instructions)

        permission = self.notifier.permission()
        if permission == NotificationPermission.GRANTED:
            try:
                self.notifier.show(
                    messages.MEDICINE_ALERT_TITLE,
                    body,
                    tag=f"med-reminder-{medicine.id}",
                    require_interaction=True,
                )
            except Exception as e:
                logger.error(f"Error creating notification: {e}")
        else:
            logger.info(f"Desktop notifications not active. Permission: {permission.value}")

        try:
            self.messenger.show(f"Medicine Alert: {body}", actions={"Dismiss": None})
        except Exception as e:
            logger.error(f"Error showing in-app medicine alert: {e}")

    def _offer_permission_prompt(self) -> None:
        permission = self.notifier.permission()
        if permission == NotificationPermission.DEFAULT:
            self.messenger.show(PERMISSION_PROMPT, actions={"Enable": self.enable_notifications, "Later": None})
        elif permission == NotificationPermission.DENIED:
            logger.info("Notifications are currently denied.")

    def enable_notifications(self) -> NotificationPermission:
        """Requests notification permission; wired to the prompt's "Enable" action."""
        permission = self.notifier.request_permission()
        if permission == NotificationPermission.GRANTED:
            self.messenger.show("Awesome! You will be notified.")
        else:
            self.messenger.show("Notifications blocked.")
        return permission


class ReminderSession:
    """
    Ties the watcher's lifetime to the session token: a watcher runs only
    while a token is set and is stopped as soon as it is cleared or replaced.
    """

    def __init__(
        self,
        notifier: Optional[DesktopNotifier] = None,
        messenger: Optional[InAppMessenger] = None,
        api_factory: Callable[[str], MedicinesApi] = MedicinesApi,
        **watcher_options,
    ):
        self.notifier = notifier or LoggingDesktopNotifier()
        self.messenger = messenger or LoggingInAppMessenger()
        self.api_factory = api_factory
        self.watcher_options = watcher_options
        self.token: Optional[str] = None
        self.watcher: Optional[MedicineReminderWatcher] = None

    def set_token(self, token: Optional[str]) -> None:
        if token == self.token:
            return
        self._stop_watcher()
        self.token = token
        if token:
            api = self.api_factory(token)
            self.watcher = MedicineReminderWatcher(api, self.notifier, self.messenger, **self.watcher_options)
            self.watcher.start()

    def logout(self) -> None:
        self.set_token(None)

    def _stop_watcher(self) -> None:
        if self.watcher is None:
            return
        self.watcher.stop()
        close = getattr(self.watcher.api, "close", None)
        if close:
            close()
        self.watcher = None


def main(session: Optional[ReminderSession] = None, stop_event: Optional[threading.Event] = None) -> None:
    """
    Runs the medicine watcher for `API_TOKEN` until interrupted
    (the `healthtrack-reminders` console script).
    """
    logging.basicConfig(level=settings.LOG_LEVEL)
    if not settings.API_TOKEN:
        raise SystemExit("API_TOKEN is not set; log in and export the session token first")

    session = session or ReminderSession()
    stop_event = stop_event or threading.Event()
    session.set_token(settings.API_TOKEN)
    try:
        stop_event.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping medicine reminders")
    finally:
        session.logout()
