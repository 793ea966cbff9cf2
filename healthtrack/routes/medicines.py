"""
Defines all API endpoints related to a user's medicines.

The client-side reminder watcher polls `GET /medicines/` for its cache.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from .. import schemas, models, database
from ..auth import get_current_user_id

router = APIRouter(prefix="/medicines", tags=["Medicines"])


def _get_owned_medicine(db: Session, medicine_id: int, user_id: int) -> models.Medicine:
    medicine = db.query(models.Medicine).filter(
        models.Medicine.id == medicine_id,
        models.Medicine.user_id == user_id
    ).first()
    if medicine is None:
        raise HTTPException(status_code=404, detail="Medicine not found")
    return medicine


@router.post("/", response_model=schemas.MedicineResponse, status_code=status.HTTP_201_CREATED)
def add_medicine(
    medicine: schemas.MedicineCreate,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Adds a new medicine for the authenticated user.
    """
    db_medicine = models.Medicine(**medicine.model_dump(), user_id=current_user_id)
    db.add(db_medicine)
    db.commit()
    db.refresh(db_medicine)
    return db_medicine


@router.get("/", response_model=List[schemas.MedicineResponse])
def get_medicines(
    active_only: bool = False,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Retrieves the authenticated user's medicines, newest first.

    Args:
        active_only (bool): Only return medicines that are still active.
        db (Session): The database session dependency.
        current_user_id (int): The user ID from the bearer token.

    Returns:
        List[models.Medicine]: The user's medicines.
    """
    query = db.query(models.Medicine).filter(models.Medicine.user_id == current_user_id)
    if active_only:
        query = query.filter(models.Medicine.is_active.is_(True))
    return query.order_by(models.Medicine.created_at.desc(), models.Medicine.id.desc()).all()


@router.put("/{medicine_id}", response_model=schemas.MedicineResponse)
def update_medicine(
    medicine_id: int,
    medicine_data: schemas.MedicineUpdate,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Updates the provided fields of one of the user's medicines.

    Raises:
        HTTPException: 404 if the medicine does not exist or belongs to someone else.
    """
    medicine = _get_owned_medicine(db, medicine_id, current_user_id)
    for field, value in medicine_data.model_dump(exclude_unset=True).items():
        setattr(medicine, field, value)

    db.commit()
    db.refresh(medicine)
    return medicine


@router.delete("/{medicine_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medicine(
    medicine_id: int,
    db: Session = Depends(database.get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    Deletes one of the user's medicines.
    """
    medicine = _get_owned_medicine(db, medicine_id, current_user_id)
    db.delete(medicine)
    db.commit()
    return
