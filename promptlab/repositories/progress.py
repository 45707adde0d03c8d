"""
Progress Repository

Completion is an edge: (:User)-[:COMPLETED {score, completedAt}]->(:Lesson).
The edge is merged, so recording the same lesson twice updates it in place.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional
import logging

from ..errors import ValidationError
from ..graph.neo4j_client import Neo4jClient
from ..graph.schema import NodeLabel, ProgressSummary
from .base import ensure_exists

logger = logging.getLogger(__name__)


# (completed lessons needed, badge)
LESSON_BADGES = [
    (1, "first-lesson"),
    (5, "five-lessons"),
    (10, "ten-lessons"),
]
STREAK_BADGES = [
    (3, "three-day-streak"),
    (7, "seven-day-streak"),
]
PERFECT_SCORE = 100


def _to_day(completed_at: Any) -> Optional[date]:
    """completedAt is stored as epoch milliseconds"""
    if completed_at is None:
        return None
    try:
        return datetime.fromtimestamp(float(completed_at) / 1000, tz=timezone.utc).date()
    except (TypeError, ValueError, OverflowError):
        return None


def compute_streaks(days: Iterable[date], today: date) -> Dict[str, int]:
    """
    Count consecutive calendar days with at least one completion.

    The current streak is still alive when its last day is today or
    yesterday.
    """
    ordered = sorted(set(days))
    if not ordered:
        return {"current": 0, "longest": 0}

    longest = running = 1
    for previous, current in zip(ordered, ordered[1:]):
        if current - previous == timedelta(days=1):
            running += 1
        else:
            running = 1
        longest = max(longest, running)

    current_streak = running if today - ordered[-1] <= timedelta(days=1) else 0
    return {"current": current_streak, "longest": longest}


def _is_perfect(score: Any) -> bool:
    return isinstance(score, (int, float)) and not isinstance(score, bool) and score >= PERFECT_SCORE


def award_badges(completed: int, longest_streak: int, perfect_scores: int = 0) -> List[str]:
    badges = [name for needed, name in LESSON_BADGES if completed >= needed]
    if perfect_scores:
        badges.append("perfect-score")
    badges += [name for needed, name in STREAK_BADGES if longest_streak >= needed]
    return badges


class ProgressRepository:
    """
    Usage:
        progress = ProgressRepository(client)
        progress.record_completion(user_id, "prompt-basics", 90)
        summary = progress.get(user_id)
    """

    def __init__(self, client: Neo4jClient):
        self.client = client

    def get(self, user_id: str, today: Optional[date] = None) -> ProgressSummary:
        rows = self.client.read("""
            MATCH (u:User {id: $user_id})-[r:COMPLETED]->(l:Lesson)
            RETURN l.id AS lessonId, r.score AS score, r.completedAt AS completedAt
            ORDER BY r.completedAt
        """, user_id=user_id)

        today = today or datetime.now(timezone.utc).date()
        days = [d for d in (_to_day(row["completedAt"]) for row in rows) if d is not None]
        streaks = compute_streaks(days, today)

        completed = [row["lessonId"] for row in rows]
        perfect = sum(1 for row in rows if _is_perfect(row["score"]))
        return ProgressSummary(
            completed_lesson_ids=completed,
            scores={row["lessonId"]: row["score"] for row in rows},
            badges=award_badges(len(completed), streaks["longest"], perfect),
            current_streak=streaks["current"],
            longest_streak=streaks["longest"],
        )

    def record_completion(self, user_id: str, lesson_id: str, score: Any) -> Dict[str, Any]:
        """
        Mark a lesson completed with a quiz score, stamping the current time.

        Raises:
            ValidationError: when score is not a number
            NotFoundError: when the user or lesson does not exist
        """
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ValidationError("A numeric score is required.")

        with self.client.transaction() as tx:
            ensure_exists(tx, NodeLabel.USER.value, user_id, "User")
            ensure_exists(tx, NodeLabel.LESSON.value, lesson_id, "Lesson")
            rows = tx.run("""
                MATCH (u:User {id: $user_id})
                MATCH (l:Lesson {id: $lesson_id})
                MERGE (u)-[r:COMPLETED]->(l)
                SET r.score = $score, r.completedAt = timestamp()
                RETURN r.score AS score, r.completedAt AS completedAt
            """, user_id=user_id, lesson_id=lesson_id, score=score)

        logger.info(f"User {user_id} completed lesson {lesson_id} with score {score}")
        return {"lessonId": lesson_id, **rows[0]}
