from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""


class TrainingPlan(Base):
    """Weekly training plans authored by trainers for their clients.

    A plan covers one Monday–Sunday week. Only one plan per client and
    week_start is active at a time; older matches are deactivated before a
    new plan for that week is created.
    """

    __tablename__ = "training_plans"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    client_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    trainer_id: Mapped[str] = mapped_column(String, nullable=False, index=True)

    week_start: Mapped[date] = mapped_column(Date, nullable=False, index=True)  # Monday
    week_end: Mapped[date] = mapped_column(Date, nullable=False)  # Sunday
    trainer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    days: Mapped[list[WorkoutDay]] = relationship(
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by=lambda: [WorkoutDay.day_of_week, WorkoutDay.order_index],
    )

    __table_args__ = (
        CheckConstraint("week_end >= week_start", name="valid_week_range"),
        Index("idx_training_plans_client_week", "client_id", "week_start"),
    )


class WorkoutDay(Base):
    """Days of a training plan (0 = Monday .. 6 = Sunday)."""

    __tablename__ = "workout_days"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    plan_id: Mapped[str] = mapped_column(
        String, ForeignKey("training_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str | None] = mapped_column(String, nullable=True)  # e.g. "Day A - Chest & Triceps"
    is_rest_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    plan: Mapped[TrainingPlan] = relationship(back_populates="days")
    exercises: Mapped[list[WorkoutExercise]] = relationship(
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="WorkoutExercise.order_index",
    )

    __table_args__ = (
        UniqueConstraint("plan_id", "day_of_week", name="uq_workout_days_plan_day"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="valid_day_of_week"),
    )


class WorkoutExercise(Base):
    """Exercises prescribed for a training day, with sets/reps parameters."""

    __tablename__ = "workout_exercises"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    workout_day_id: Mapped[str] = mapped_column(
        String, ForeignKey("workout_days.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_id: Mapped[str] = mapped_column(String, nullable=False, index=True)  # Exercise library reference

    sets: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    reps: Mapped[str] = mapped_column(String, nullable=False, default="10")  # "12" or a range like "10-12"
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    rest_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    day: Mapped[WorkoutDay] = relationship(back_populates="exercises")

    __table_args__ = (
        CheckConstraint("sets > 0 AND sets <= 20", name="valid_sets"),
        CheckConstraint("weight_kg >= 0", name="valid_weight"),
        CheckConstraint("rest_seconds >= 0 AND rest_seconds <= 600", name="valid_rest_seconds"),
    )
