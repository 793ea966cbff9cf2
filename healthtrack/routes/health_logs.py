"""
Defines the API endpoints for vitals entries.

A log created today stops that day's "log your vitals" e-mail nudge.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from .. import schemas, models, database
from ..auth import get_current_user_id

router = APIRouter(prefix="/health", tags=["Health Logs"])


def _get_owned_log(db: Session, log_id: int, user_id: int) -> models.HealthLog:
    log = db.query(models.HealthLog).filter(
        models.HealthLog.id == log_id,
        models.HealthLog.user_id == user_id
    ).first()
    if log is None:
        raise HTTPException(status_code=404, detail="Health log not found")
    return log


@router.post("/logs", response_model=schemas.HealthLogResponse, status_code=status.HTTP_201_CREATED)
def create_health_log(
    log: schemas.HealthLogCreate,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Records a vitals entry for the authenticated user.
    """
    values = log.model_dump()
    if values["log_date"] is None:
        values["log_date"] = datetime.now()

    db_log = models.HealthLog(**values, user_id=current_user_id)
    db.add(db_log)
    db.commit()
    db.refresh(db_log)
    return db_log


@router.get("/logs", response_model=List[schemas.HealthLogResponse])
def get_health_logs(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Retrieves the user's vitals entries, most recent first.

    Args:
        start_date (datetime, optional): Only entries logged at or after this moment.
        end_date (datetime, optional): Only entries logged at or before this moment.
        skip (int): Number of entries to skip, for paging.
        limit (int): Maximum number of entries to return.
        db (Session): The database session dependency.
        current_user_id (int): The user ID from the bearer token.

    Returns:
        List[models.HealthLog]: The matching entries.
    """
    query = db.query(models.HealthLog).filter(models.HealthLog.user_id == current_user_id)
    if start_date is not None:
        query = query.filter(models.HealthLog.log_date >= start_date)
    if end_date is not None:
        query = query.filter(models.HealthLog.log_date <= end_date)
    return query.order_by(models.HealthLog.log_date.desc()).offset(skip).limit(limit).all()


@router.get("/logs/{log_id}", response_model=schemas.HealthLogResponse)
def get_health_log(
    log_id: int,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    return _get_owned_log(db, log_id, current_user_id)


@router.delete("/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_health_log(
    log_id: int,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    log = _get_owned_log(db, log_id, current_user_id)
    db.delete(log)
    db.commit()
    return
