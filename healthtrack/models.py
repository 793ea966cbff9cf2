"""
Defines the SQLAlchemy ORM models for the database.

Each class in this file represents a table in the database and its columns.
The reminder scans only ever read from these tables.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, Enum, Float, ForeignKey,
    Integer, String, Text, func,
)
from sqlalchemy.orm import relationship
from .database import Base


class User(Base):
    """
    Represents the 'users' table in the database.

    Credentials live with the external auth service; only the fields the
    reminder logic needs are kept here.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("reminder_time >= 0 AND reminder_time <= 23", name="ck_users_reminder_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)

    # Hour of day (0-23) for the "you haven't logged today" nudge
    reminder_time = Column(Integer, nullable=False, default=20, index=True)
    ai_data_access = Column(Boolean, nullable=False, default=False)

    medicines = relationship("Medicine", back_populates="user", cascade="all, delete-orphan")
    reminders = relationship("Reminder", back_populates="user", cascade="all, delete-orphan")
    doctors = relationship("Doctor", back_populates="user", cascade="all, delete-orphan")
    health_logs = relationship("HealthLog", back_populates="user", cascade="all, delete-orphan")


class Medicine(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    dosage = Column(String(100), nullable=True)  # e.g., "500mg", "1 tablet"
    frequency = Column(String(100), nullable=False, default="Daily")
    time = Column(String(10), nullable=True)  # 24h "HH:MM", zero-padded
    instructions = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="medicines")


class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum("medication", "appointment", "checkup", name="reminder_type"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    time = Column(String(10), nullable=True)
    frequency = Column(
        Enum("daily", "weekly", "monthly", "once", name="reminder_frequency"),
        nullable=False,
        default="once",
    )
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="reminders")


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    specialization = Column(String(255), nullable=True)
    hospital = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    next_appointment = Column(DateTime, nullable=True, index=True)

    user = relationship("User", back_populates="doctors")


class HealthLog(Base):
    """Represents the 'health_logs' table: one row per vitals entry."""
    __tablename__ = "health_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Local server time, compared against local midnight by the daily nudge
    log_date = Column(DateTime, nullable=False, default=datetime.now, index=True)

    # Vitals
    systolic = Column(Integer, nullable=True)
    diastolic = Column(Integer, nullable=True)
    blood_sugar = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    heart_rate = Column(Integer, nullable=True)
    temperature = Column(Float, nullable=True)
    oxygen_level = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    user = relationship("User", back_populates="health_logs")
