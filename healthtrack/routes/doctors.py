"""
Defines all API endpoints related to a user's doctors.

`next_appointment` is what the daily appointment scan reads, so creating or
updating a doctor is how a visit gets scheduled.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from .. import schemas, models, database
from ..auth import get_current_user_id

router = APIRouter(prefix="/doctors", tags=["Doctors"])


def _get_owned_doctor(db: Session, doctor_id: int, user_id: int) -> models.Doctor:
    doctor = db.query(models.Doctor).filter(
        models.Doctor.id == doctor_id,
        models.Doctor.user_id == user_id
    ).first()
    if doctor is None:
        raise HTTPException(status_code=404, detail="Doctor not found")
    return doctor


@router.post("/", response_model=schemas.DoctorResponse, status_code=status.HTTP_201_CREATED)
def add_doctor(
    doctor: schemas.DoctorCreate,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Adds a new doctor, optionally with the next appointment already booked.
    """
    db_doctor = models.Doctor(**doctor.model_dump(), user_id=current_user_id)
    db.add(db_doctor)
    db.commit()
    db.refresh(db_doctor)
    return db_doctor


@router.get("/", response_model=List[schemas.DoctorResponse])
def get_doctors(
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """Retrieves the authenticated user's doctors, newest first."""
    return db.query(models.Doctor).filter(
        models.Doctor.user_id == current_user_id
    ).order_by(models.Doctor.id.desc()).all()


@router.get("/{doctor_id}", response_model=schemas.DoctorResponse)
def get_doctor(
    doctor_id: int,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    return _get_owned_doctor(db, doctor_id, current_user_id)


@router.put("/{doctor_id}", response_model=schemas.DoctorResponse)
def update_doctor(
    doctor_id: int,
    doctor_data: schemas.DoctorUpdate,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Updates the provided fields of one of the user's doctors.

    Args:
        doctor_id (int): The doctor to change.
        doctor_data (schemas.DoctorUpdate): The fields to change; `next_appointment`
            may be set to null once the visit is over.
        db (Session): The database session dependency.
        current_user_id (int): The user ID from the bearer token.

    Raises:
        HTTPException: 404 if the doctor does not exist or belongs to someone else.
    """
    doctor = _get_owned_doctor(db, doctor_id, current_user_id)
    for field, value in doctor_data.model_dump(exclude_unset=True).items():
        setattr(doctor, field, value)

    db.commit()
    db.refresh(doctor)
    return doctor


@router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_doctor(
    doctor_id: int,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Deletes one of the user's doctors.
    """
    doctor = _get_owned_doctor(db, doctor_id, current_user_id)
    db.delete(doctor)
    db.commit()
    return
