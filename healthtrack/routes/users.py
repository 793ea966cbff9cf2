"""
Defines the API endpoints for a user's reminder preferences.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from .. import schemas, models, database
from ..auth import get_current_user_id

router = APIRouter(prefix="/users", tags=["Users"])


def _get_user(db: Session, user_id: int) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/me/reminder-settings", response_model=schemas.ReminderSettingsResponse)
def read_reminder_settings(
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """Retrieves the authenticated user's reminder preferences."""
    return _get_user(db, current_user_id)


@router.patch("/me/reminder-settings", response_model=schemas.ReminderSettingsResponse)
def update_reminder_settings(
    settings_data: schemas.ReminderSettingsUpdate,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Updates the hour of the daily log nudge and/or the AI data-access flag.

    Args:
        settings_data (schemas.ReminderSettingsUpdate): The preferences to change.
        db (Session): The database session dependency.
        current_user_id (int): The user ID from the bearer token.

    Raises:
        HTTPException: 404 if the user is not found.

    Returns:
        models.User: The updated user.
    """
    user = _get_user(db, current_user_id)

    # Update fields only if they are provided in the request
    if settings_data.reminder_time is not None:
        user.reminder_time = settings_data.reminder_time
    if settings_data.ai_data_access is not None:
        user.ai_data_access = settings_data.ai_data_access

    db.commit()
    db.refresh(user)
    return user
