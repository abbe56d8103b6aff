"""Tests for leaderboard aggregation, ordering and badges."""

from datetime import timedelta

import pytest

from student_tracker.services.exceptions import DataIntegrityError
from student_tracker.services.ranking import (
    BadgeTier,
    CompletionSample,
    badge_tier,
    compute_ranking,
    format_duration,
)
from tests.factories import DAY_0, days


def sample(user_id: int, assignment_id: int, posted_day: float, completed_day: float, name: str | None = None):
    return CompletionSample(
        user_id=user_id,
        name=name or f"user{user_id}",
        profile_image_url=None,
        overall_rank=None,
        assignment_id=assignment_id,
        title=f"Assignment {assignment_id}",
        assignment_created_at=days(posted_day),
        completed_at=days(completed_day),
    )


class TestComputeRanking:
    """Tests for compute_ranking."""

    def test_empty_input_gives_empty_leaderboard(self):
        assert compute_ranking([]) == []

    def test_faster_average_ranks_first(self):
        # X finishes in 1 day, Y in 2 days.
        entries = compute_ranking([
            sample(2, 1, 0, 2, name="Y"),
            sample(1, 1, 0, 1, name="X"),
        ])

        assert [e.name for e in entries] == ["X", "Y"]
        assert [e.position for e in entries] == [1, 2]
        assert entries[0].average_completion_time == timedelta(days=1)
        assert entries[0].average_completion_time_label == "1 day"
        assert entries[1].average_completion_time_label == "2 days"
        assert entries[0].badge == "gold"
        assert entries[1].badge == "silver"

    def test_average_spans_all_assignments(self):
        entries = compute_ranking([
            sample(1, 1, 0, 1),
            sample(1, 2, 0, 3),
        ])

        assert len(entries) == 1
        assert entries[0].average_completion_time == timedelta(days=2)
        assert entries[0].completed_assignments == 2

    def test_equal_average_prefers_more_completions(self):
        entries = compute_ranking([
            sample(1, 1, 0, 1),
            sample(2, 1, 0, 1),
            sample(2, 2, 1, 2),
        ])

        assert [e.user_id for e in entries] == [2, 1]
        assert entries[0].completed_assignments == 2

    def test_full_tie_breaks_on_user_id_with_distinct_positions(self):
        entries = compute_ranking([
            sample(9, 1, 0, 1),
            sample(4, 1, 0, 1),
            sample(7, 1, 0, 1),
        ])

        assert [e.user_id for e in entries] == [4, 7, 9]
        assert [e.position for e in entries] == [1, 2, 3]

    def test_positions_are_contiguous_from_one(self):
        entries = compute_ranking(sample(uid, 1, 0, uid) for uid in range(1, 8))

        assert [e.position for e in entries] == list(range(1, 8))
        assert [e.badge for e in entries] == ["gold", "silver", "silver", None, None, None, None]

    def test_zero_completion_time_is_allowed(self):
        entries = compute_ranking([sample(1, 1, 0, 0)])

        assert entries[0].average_completion_time == timedelta(0)
        assert entries[0].average_completion_time_label == "less than a minute"

    def test_completion_before_posting_is_integrity_error(self):
        with pytest.raises(DataIntegrityError):
            compute_ranking([sample(1, 1, 2, 1)])

    def test_recent_completions_are_newest_first_and_limited(self):
        entries = compute_ranking(
            [sample(1, n, 0, n) for n in range(1, 8)],
            recent_limit=3,
        )

        recent = entries[0].recent_completions
        assert [r.title for r in recent] == ["Assignment 7", "Assignment 6", "Assignment 5"]
        assert recent[0].completed_at == DAY_0 + timedelta(days=7)
        assert recent[0].completion_time == timedelta(days=7)
        assert entries[0].completed_assignments == 7


class TestBadgeTier:
    """Tests for badge_tier."""

    @pytest.mark.parametrize(
        "position,expected",
        [
            (1, BadgeTier.GOLD),
            (2, BadgeTier.SILVER),
            (3, BadgeTier.SILVER),
            (4, None),
            (50, None),
        ],
    )
    def test_tiers(self, position, expected):
        assert badge_tier(position) == expected


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=20), "less than a minute"),
            (timedelta(minutes=1), "1 minute"),
            (timedelta(minutes=30), "30 minutes"),
            (timedelta(hours=1), "about 1 hour"),
            (timedelta(hours=5), "about 5 hours"),
            (timedelta(hours=24), "1 day"),
            (timedelta(days=3), "3 days"),
            (timedelta(days=45), "2 months"),
            (timedelta(days=400), "about 1 year"),
        ],
    )
    def test_labels(self, delta, expected):
        assert format_duration(delta) == expected
