"""
Reading Goals Service

One goal per user per calendar year. Progress is not stored: it is the
number of read books whose date_finished falls in the goal's year.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookworm.exceptions import DataUnavailableError, ValidationError
from bookworm.models import ReadingGoal
from bookworm.stores import library as library_store
from bookworm.utils import round_half_up

logger = logging.getLogger(__name__)


def count_books_finished(db: Session, user_id: int, year: int) -> int:
    """Count the user's read entries finished during `year` (UTC)."""
    start = datetime(year, 1, 1, tzinfo=UTC)
    end = datetime(year + 1, 1, 1, tzinfo=UTC)
    return library_store.count_finished_between(db, user_id, start, end)


def _find_goal(db: Session, user_id: int, year: int) -> ReadingGoal | None:
    stmt = select(ReadingGoal).where(
        ReadingGoal.user_id == user_id,
        ReadingGoal.year == year,
    )
    try:
        return db.execute(stmt).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load {year} goal of user {user_id}: {e}")
        raise DataUnavailableError("goal lookup") from e


def _goal_progress(goal: ReadingGoal, current_books: int) -> dict[str, Any]:
    percentage = (
        int(round_half_up(current_books / goal.target_books * 100))
        if goal.target_books > 0
        else 0
    )
    return {
        "id": goal.id,
        "year": goal.year,
        "target_books": goal.target_books,
        "current_books": current_books,
        "percentage": percentage,
    }


def get_goal(db: Session, user_id: int, year: int | None = None) -> dict[str, Any]:
    """
    Return the user's goal for `year` (default: current year) with progress.

    Returns:
        {"goal": {...} | None, "current_books": int}

    Raises:
        DataUnavailableError: If the goal or the finished count cannot be read
    """
    year = year or datetime.now(UTC).year
    current_books = count_books_finished(db, user_id, year)
    goal = _find_goal(db, user_id, year)

    return {
        "goal": _goal_progress(goal, current_books) if goal else None,
        "current_books": current_books,
    }


def set_goal(
    db: Session,
    user_id: int,
    target_books: int,
    year: int | None = None,
) -> dict[str, Any]:
    """
    Create or update the user's goal for `year` (default: current year).

    Raises:
        ValidationError: If target_books is below 1
        DataUnavailableError: If the goal cannot be read or saved
    """
    if target_books is None or target_books < 1:
        raise ValidationError("Target must be at least 1 book")

    year = year or datetime.now(UTC).year

    goal = _find_goal(db, user_id, year)
    if goal is None:
        goal = ReadingGoal(user_id=user_id, year=year, target_books=target_books)
        db.add(goal)
    else:
        goal.target_books = target_books

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save {year} goal of user {user_id}: {e}")
        raise DataUnavailableError("goal write") from e
    db.refresh(goal)

    logger.info(f"User {user_id} set a {year} reading goal of {target_books} books")

    current_books = count_books_finished(db, user_id, year)
    return {
        "goal": _goal_progress(goal, current_books),
        "current_books": current_books,
    }
