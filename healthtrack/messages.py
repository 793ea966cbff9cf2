# healthtrack/messages.py
"""
Builds the text of every reminder the service delivers: the three server
emails and the client-side medicine alert.
"""

from html import escape
from typing import Optional, Tuple

from . import models

DAILY_LOG_SUBJECT = "Reminder: Log Your Vitals"
MEDICINE_ALERT_TITLE = "Time to take your medicine! 💊"


def daily_log_email(user: models.User, hour: int, client_url: str) -> Tuple[str, str]:
    """Returns (subject, html) for the "you haven't logged today" nudge."""
    html = f"""
        <h2>Daily Health Reminder 🩺</h2>
        <p>Hi {escape(user.name or 'there')},</p>
        <p>It's {hour:02d}:00 - time for your daily check-in!</p>
        <p>We noticed you haven't logged your vitals today yet.</p>
        <p>Consistency is key to tracking your health! Please take a moment to record your blood pressure, sugar, or weight.</p>
        <br/>
        <a href="{escape(client_url.rstrip('/'))}/dashboard">Log Now</a>
    """
    return DAILY_LOG_SUBJECT, html


def medicine_email(medicine: models.Medicine) -> Tuple[str, str]:
    """Returns (subject, html) for an hourly medicine reminder."""
    user = medicine.user
    subject = f"Medicine Reminder: {medicine.name}"
    html = f"""
        <h2>Time to take your medicine! 💊</h2>
        <p>Hi {escape(user.name or 'there')},</p>
        <p>This is a reminder to take your scheduled medication:</p>
        <div style="background-color: #f3f4f6; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <p><strong>Medicine:</strong> {escape(medicine.name)}</p>
            <p><strong>Dosage:</strong> {escape(medicine.dosage or 'As prescribed')}</p>
            <p><strong>Instructions:</strong> {escape(medicine.instructions or 'As prescribed')}</p>
        </div>
        <p>Stay healthy!</p>
        <p>Health Tracker</p>
    """
    return subject, html


def appointment_email(doctor: models.Doctor) -> Tuple[str, str]:
    """Returns (subject, html) for a same-day appointment reminder."""
    user = doctor.user
    subject = f"Appointment Today: {doctor.name}"
    specialization = f" ({escape(doctor.specialization)})" if doctor.specialization else ""
    html = f"""
        <h2>Appointment Reminder 👨‍⚕️</h2>
        <p>Hi {escape(user.name or 'there')},</p>
        <p>You have an appointment scheduled for <strong>today</strong> with <strong>{escape(doctor.name)}</strong>{specialization}.</p>
        <p>Notes: {escape(doctor.notes or 'None')}</p>
    """
    return subject, html


def medicine_alert_body(name: str, dosage: Optional[str] = None, instructions: Optional[str] = None) -> str:
    """Body of the client-side desktop/in-app medicine alert."""
    body = f"Take {name}"
    if dosage:
        body += f" ({dosage})"
    body += "."
    if instructions:
        body += f" {instructions}"
    return body
