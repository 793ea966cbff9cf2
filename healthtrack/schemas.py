"""
Defines Pydantic schemas for API data validation and serialization.

These schemas determine the shape of the data for API requests and responses,
ensuring that data is valid and formatted correctly.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .timeutils import normalize_hhmm


def _normalize_time(value: Optional[str]) -> Optional[str]:
    """Accepts "H:MM" or "HH:MM" and stores the zero-padded form."""
    if value is None or not value.strip():
        return None
    return normalize_hhmm(value)


# --- Medicines ---
class MedicineBase(BaseModel):
    """Fields shared by every medicine schema."""
    name: str = Field(..., min_length=1, max_length=255)
    dosage: Optional[str] = Field(None, max_length=100, description="e.g., 500mg, 1 tablet")
    frequency: str = Field("Daily", max_length=100, description="Daily, Weekly, As needed")
    time: Optional[str] = Field(None, description="24h format HH:MM, e.g., 08:00")
    instructions: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True


class MedicineCreate(MedicineBase):
    """Schema for validating a new medicine."""

    @field_validator('time')
    def time_must_be_hhmm(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_time(v)


class MedicineUpdate(BaseModel):
    """Schema for partial medicine updates; only the provided fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    dosage: Optional[str] = Field(None, max_length=100)
    frequency: Optional[str] = Field(None, max_length=100)
    time: Optional[str] = None
    instructions: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    @field_validator('time')
    def time_must_be_hhmm(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_time(v)

    @field_validator('name', 'frequency', 'is_active')
    def cannot_be_null(cls, v, info):
        # Only `time` may be cleared; these columns are NOT NULL
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class MedicineResponse(MedicineBase):
    """Schema for medicine data in API responses, including database fields."""
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Doctors ---
class DoctorBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    specialization: Optional[str] = Field(None, max_length=255)
    hospital: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    notes: Optional[str] = None
    next_appointment: Optional[datetime] = Field(None, description="Local date and time of the next visit")


class DoctorCreate(DoctorBase):
    """Schema for validating a new doctor."""
    pass


class DoctorUpdate(BaseModel):
    """Schema for partial doctor updates. Send `next_appointment: null` to clear the visit."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    specialization: Optional[str] = Field(None, max_length=255)
    hospital: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    notes: Optional[str] = None
    next_appointment: Optional[datetime] = None

    @field_validator('name')
    def name_cannot_be_null(cls, v):
        if v is None:
            raise ValueError("name cannot be null")
        return v


class DoctorResponse(DoctorBase):
    id: int
    user_id: int

    class Config:
        from_attributes = True


# --- Health logs ---
class HealthLogCreate(BaseModel):
    """Schema for a vitals entry. `log_date` defaults to the current local time."""
    log_date: Optional[datetime] = None
    systolic: Optional[int] = Field(None, ge=0, le=300)
    diastolic: Optional[int] = Field(None, ge=0, le=200)
    blood_sugar: Optional[float] = Field(None, ge=0, le=999.99)
    weight: Optional[float] = Field(None, ge=0, le=999.99)
    heart_rate: Optional[int] = Field(None, ge=0, le=300)
    temperature: Optional[float] = Field(None, ge=0, le=150)
    oxygen_level: Optional[int] = Field(None, ge=0, le=100)
    notes: Optional[str] = None


class HealthLogResponse(HealthLogCreate):
    id: int
    user_id: int
    log_date: datetime

    class Config:
        from_attributes = True


# --- User reminder preferences ---
class ReminderSettingsUpdate(BaseModel):
    """Schema for updating the user's reminder preferences."""
    reminder_time: Optional[int] = Field(None, ge=0, le=23, description="Hour of the daily log nudge")
    ai_data_access: Optional[bool] = None


class ReminderSettingsResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    reminder_time: int
    ai_data_access: bool

    class Config:
        from_attributes = True
