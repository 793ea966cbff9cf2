# healthtrack/scheduler.py
"""
Server-side reminder scans, run by the cron scheduler independently of any
open client session.

Each scan opens its own session, reads the record store and emails users
one at a time. A failed send is logged and the scan moves on to the next
recipient; nothing ever propagates back into the scheduler.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.base import BaseScheduler
from sqlalchemy.orm import Session, joinedload

from . import messages, models
from .config import settings
from .database import SessionLocal
from .dedup import DedupKey, DedupTracker
from .email_service import get_email_service
from .timeutils import day_bounds, hour_prefix, start_of_day

logger = logging.getLogger(__name__)

DAILY_LOG_JOB_ID = "daily_log_reminder"
MEDICINE_JOB_ID = "medicine_reminder"
APPOINTMENT_JOB_ID = "appointment_reminder"

# Keys of emails already sent by this process, one tracker per scan
daily_log_sent = DedupTracker(settings.DEDUP_RETENTION_DAYS)
medicine_sent = DedupTracker(settings.DEDUP_RETENTION_DAYS)
appointment_sent = DedupTracker(settings.DEDUP_RETENTION_DAYS)


def _deliver(mailer, tracker: DedupTracker, key: DedupKey, to: str, subject: str, html: str) -> bool:
    """Sends one email unless its key was already delivered. Never raises."""
    if key in tracker:
        logger.info(f"Skipping duplicate reminder {key} for {to}")
        return False
    try:
        mailer.send_email(to, subject, html)
    except Exception as e:
        logger.error(f"Failed to send {subject!r} to {to}: {e}")
        return False
    tracker.record(key)
    return True


def send_daily_log_reminders(
    now: Optional[datetime] = None,
    session_factory: Callable[[], Session] = SessionLocal,
    mailer=None,
    tracker: Optional[DedupTracker] = None,
) -> int:
    """
    Emails every user whose preferred reminder hour is the current hour and
    who has not logged any vitals since midnight.

    Returns:
        int: The number of emails sent.
    """
    now = now or datetime.now()
    mailer = mailer or get_email_service()
    tracker = tracker if tracker is not None else daily_log_sent
    tracker.prune(now.date())
    logger.info("Running daily log reminder check...")

    sent = 0
    db = session_factory()
    try:
        midnight = start_of_day(now)
        users = db.query(models.User).filter(models.User.reminder_time == now.hour).all()
        logger.info(f"Found {len(users)} users with reminder time {now.hour:02d}:00")

        for user in users:
            logged_today = (
                db.query(models.HealthLog.id)
                .filter(models.HealthLog.user_id == user.id, models.HealthLog.log_date >= midnight)
                .first()
            )
            if logged_today:
                continue

            subject, html = messages.daily_log_email(user, now.hour, settings.CLIENT_URL)
            key = DedupKey.for_moment(user.id, now, f"{now.hour:02d}:00")
            if _deliver(mailer, tracker, key, user.email, subject, html):
                sent += 1

        logger.info(f"Daily log reminder check complete. Sent {sent} emails.")
    except Exception as e:
        logger.exception(f"Error in daily log reminder: {e}")
    finally:
        db.close()
    return sent


def send_medicine_reminders(
    now: Optional[datetime] = None,
    session_factory: Callable[[], Session] = SessionLocal,
    mailer=None,
    tracker: Optional[DedupTracker] = None,
) -> int:
    """
    Emails the owner of every active medicine scheduled within the current hour.

    Matching is by "HH:" prefix, so a medicine at 08:47 is reminded on the
    08:00 run rather than at 08:47.

    Returns:
        int: The number of emails sent.
    """
    now = now or datetime.now()
    mailer = mailer or get_email_service()
    tracker = tracker if tracker is not None else medicine_sent
    tracker.prune(now.date())
    logger.info("Running hourly medicine check...")

    sent = 0
    db = session_factory()
    try:
        prefix = hour_prefix(now)
        medicines = (
            db.query(models.Medicine)
            .options(joinedload(models.Medicine.user))
            .filter(models.Medicine.is_active.is_(True), models.Medicine.time.like(f"{prefix}%"))
            .all()
        )
        logger.info(f"Found {len(medicines)} medicines scheduled for the {prefix}00 hour")

        for medicine in medicines:
            if not medicine.user or not medicine.user.email:
                continue
            subject, html = messages.medicine_email(medicine)
            key = DedupKey.for_moment(medicine.id, now, f"{prefix}00")
            if _deliver(mailer, tracker, key, medicine.user.email, subject, html):
                sent += 1
                logger.info(f"Sent medicine reminder to {medicine.user.email} for {medicine.name}")
    except Exception as e:
        logger.exception(f"Error in medicine reminder job: {e}")
    finally:
        db.close()
    return sent


def send_appointment_reminders(
    now: Optional[datetime] = None,
    session_factory: Callable[[], Session] = SessionLocal,
    mailer=None,
    tracker: Optional[DedupTracker] = None,
) -> int:
    """
    Emails the owner of every doctor with an appointment falling today
    (local midnight to the next midnight).

    Returns:
        int: The number of emails sent.
    """
    now = now or datetime.now()
    mailer = mailer or get_email_service()
    tracker = tracker if tracker is not None else appointment_sent
    tracker.prune(now.date())
    logger.info("Running appointment check...")

    sent = 0
    db = session_factory()
    try:
        today, tomorrow = day_bounds(now)
        doctors = (
            db.query(models.Doctor)
            .options(joinedload(models.Doctor.user))
            .filter(models.Doctor.next_appointment >= today, models.Doctor.next_appointment < tomorrow)
            .all()
        )
        logger.info(f"Found {len(doctors)} appointments scheduled for {today.date()}")

        for doctor in doctors:
            if not doctor.user or not doctor.user.email:
                continue
            subject, html = messages.appointment_email(doctor)
            key = DedupKey.for_moment(doctor.id, now, doctor.next_appointment.strftime("%H:%M"))
            if _deliver(mailer, tracker, key, doctor.user.email, subject, html):
                sent += 1
                logger.info(f"Sent appointment reminder to {doctor.user.email}")
    except Exception as e:
        logger.exception(f"Error in appointment reminder: {e}")
    finally:
        db.close()
    return sent


def register_reminder_jobs(scheduler: BaseScheduler) -> None:
    """Adds the three reminder scans to a scheduler with their cron schedules."""
    # Hourly, on the hour
    scheduler.add_job(send_daily_log_reminders, 'cron', minute=0, id=DAILY_LOG_JOB_ID, replace_existing=True)
    scheduler.add_job(send_medicine_reminders, 'cron', minute=0, id=MEDICINE_JOB_ID, replace_existing=True)
    # Once a day at the configured hour
    scheduler.add_job(
        send_appointment_reminders,
        'cron',
        hour=settings.APPOINTMENT_REMINDER_HOUR,
        minute=0,
        id=APPOINTMENT_JOB_ID,
        replace_existing=True,
    )
    logger.info(
        f"Registered reminder jobs (appointments daily at {settings.APPOINTMENT_REMINDER_HOUR:02d}:00)."
    )
