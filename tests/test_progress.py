"""
Tests for lesson progress, streaks and badges
"""

from datetime import date, datetime, timezone

import pytest

from conftest import FakeNeo4jClient, exists
from promptlab.errors import NotFoundError, ValidationError
from promptlab.repositories.progress import ProgressRepository, award_badges, compute_streaks


def epoch_ms(day: date) -> int:
    return int(datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc).timestamp() * 1000)


class TestStreaks:
    """Tests for compute_streaks"""

    def test_no_days(self):
        assert compute_streaks([], date(2026, 3, 10)) == {"current": 0, "longest": 0}

    def test_consecutive_days_ending_today(self):
        days = [date(2026, 3, 8), date(2026, 3, 9), date(2026, 3, 10)]
        assert compute_streaks(days, date(2026, 3, 10)) == {"current": 3, "longest": 3}

    def test_streak_alive_until_end_of_next_day(self):
        """Yesterday's completion keeps the current streak"""
        days = [date(2026, 3, 8), date(2026, 3, 9)]
        assert compute_streaks(days, date(2026, 3, 10))["current"] == 2

    def test_broken_streak(self):
        days = [date(2026, 3, 1), date(2026, 3, 2), date(2026, 3, 3), date(2026, 3, 9)]
        streaks = compute_streaks(days, date(2026, 3, 20))
        assert streaks == {"current": 0, "longest": 3}

    def test_same_day_counts_once(self):
        days = [date(2026, 3, 10), date(2026, 3, 10)]
        assert compute_streaks(days, date(2026, 3, 10)) == {"current": 1, "longest": 1}


class TestBadges:
    """Tests for award_badges"""

    def test_no_progress(self):
        assert award_badges(0, 0) == []

    def test_lesson_and_streak_badges(self):
        badges = award_badges(5, 3)
        assert badges == ["first-lesson", "five-lessons", "three-day-streak"]

    def test_perfect_score(self):
        assert "perfect-score" in award_badges(1, 1, perfect_scores=1)


class TestProgressRepository:
    """Tests for ProgressRepository"""

    def setup_method(self):
        self.client = FakeNeo4jClient()
        self.progress = ProgressRepository(self.client)

    def test_get_summary(self):
        self.client.on("-[r:COMPLETED]->(l:Lesson)", [
            {"lessonId": "basics", "score": 100, "completedAt": epoch_ms(date(2026, 3, 9))},
            {"lessonId": "few-shot", "score": 80, "completedAt": epoch_ms(date(2026, 3, 10))},
        ])
        summary = self.progress.get("user-1", today=date(2026, 3, 10))

        assert summary.completed_lesson_ids == ["basics", "few-shot"]
        assert summary.scores == {"basics": 100, "few-shot": 80}
        assert isinstance(summary.to_response()["quizScores"]["basics"], int)
        assert summary.current_streak == 2
        assert summary.longest_streak == 2
        assert summary.badges == ["first-lesson", "perfect-score"]

    def test_get_empty(self):
        response = self.progress.get("user-1").to_response()
        assert response == {
            "completedLessons": [],
            "quizScores": {},
            "badges": [],
            "currentStreak": 0,
            "longestStreak": 0,
        }

    @pytest.mark.parametrize("score", [None, "90", True, [90]])
    def test_score_must_be_numeric(self, score):
        """Non-numeric scores (bool included) are rejected before any write"""
        with pytest.raises(ValidationError):
            self.progress.record_completion("user-1", "basics", score)
        assert self.client.calls == []

    def test_record_completion_merges_edge(self):
        """Recording twice updates the same COMPLETED edge"""
        self.client.on(exists("User"), [{"found": 1}])
        self.client.on(exists("Lesson"), [{"found": 1}])
        self.client.on("MERGE (u)-[r:COMPLETED]->(l)", lambda p: [{"score": p["score"], "completedAt": 1}])

        self.progress.record_completion("user-1", "basics", 70)
        result = self.progress.record_completion("user-1", "basics", 95.5)

        assert result == {"lessonId": "basics", "score": 95.5, "completedAt": 1}
        statements = self.client.statements("COMPLETED")
        assert len(statements) == 2
        assert all("MERGE (u)-[r:COMPLETED]->(l)" in cypher for _, cypher, _ in statements)
        assert all("CREATE" not in cypher for _, cypher, _ in statements)

    def test_record_completion_unknown_lesson(self):
        self.client.on(exists("User"), [{"found": 1}])
        with pytest.raises(NotFoundError) as exc_info:
            self.progress.record_completion("user-1", "ghost", 50)
        assert exc_info.value.entity == "Lesson"
