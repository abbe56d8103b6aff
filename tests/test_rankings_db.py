"""Tests for unit leaderboards and the cached overall rank."""

import pytest
from sqlalchemy import event, select

from student_tracker.db.models import AssignmentCompletion, Unit, User
from student_tracker.services.completions import record_completion
from student_tracker.services.exceptions import NotFoundError
from student_tracker.services.ranking import (
    get_unit_rankings,
    refresh_overall_ranks,
    refresh_overall_ranks_after_commit,
)
from tests.factories import days


class TestGetUnitRankings:
    """Tests for get_unit_rankings."""

    async def test_unknown_unit(self, db):
        with pytest.raises(NotFoundError):
            await get_unit_rankings(db, "NOPE 0000")

    async def test_no_completions_gives_empty_list(self, db, make_assignment, unit):
        await make_assignment("Problem set 1")

        assert await get_unit_rankings(db, unit.unit_code) == []

    async def test_orders_by_average_completion_time(self, db, make_user, make_assignment, unit):
        x = await make_user("X")
        y = await make_user("Y")
        await make_user("Z")  # never completes anything
        assignment = await make_assignment("Problem set 1", created_at=days(0))

        await record_completion(db, y.id, assignment.id, now=days(2))
        await record_completion(db, x.id, assignment.id, now=days(1))
        await db.commit()

        entries = await get_unit_rankings(db, unit.unit_code)

        assert [(e.name, e.position, e.badge) for e in entries] == [
            ("X", 1, "gold"),
            ("Y", 2, "silver"),
        ]
        assert entries[0].average_completion_time_label == "1 day"
        assert entries[0].recent_completions[0].title == "Problem set 1"

    async def test_only_counts_the_requested_unit(self, db, make_user, make_assignment, unit):
        db.add(Unit(unit_code="PHY 1101", name="Mechanics", category="Physics"))
        await db.commit()
        student = await make_user("amina")
        maths = await make_assignment("Problem set 1", created_at=days(0))
        physics = await make_assignment("Lab report", created_at=days(0), unit_code="PHY 1101")

        await record_completion(db, student.id, maths.id, now=days(1))
        await record_completion(db, student.id, physics.id, now=days(9))

        entries = await get_unit_rankings(db, unit.unit_code)

        assert len(entries) == 1
        assert entries[0].completed_assignments == 1
        assert entries[0].average_completion_time_label == "1 day"


class TestRefreshOverallRanks:
    """Tests for refresh_overall_ranks."""

    async def test_caches_positions_and_clears_unranked(self, db, make_user, make_assignment):
        fast = await make_user("fast")
        slow = await make_user("slow")
        idle = await make_user("idle", rank=4)
        assignment = await make_assignment("Problem set 1", created_at=days(0))
        await record_completion(db, slow.id, assignment.id, now=days(3))
        await record_completion(db, fast.id, assignment.id, now=days(1))

        ranked = await refresh_overall_ranks(db)
        await db.commit()

        assert ranked == 2
        result = await db.execute(select(User.id, User.rank))
        ranks = dict(result.all())
        assert ranks[fast.id] == 1
        assert ranks[slow.id] == 2
        assert ranks[idle.id] is None

    async def test_unchanged_ranks_are_not_rewritten(self, db, engine, make_user, make_assignment):
        fast = await make_user("fast")
        slow = await make_user("slow")
        assignment = await make_assignment("Problem set 1", created_at=days(0))
        await record_completion(db, slow.id, assignment.id, now=days(3))
        await record_completion(db, fast.id, assignment.id, now=days(1))
        await refresh_overall_ranks(db)
        await db.commit()

        updates = []

        def count_updates(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith("UPDATE"):
                updates.append(statement)

        event.listen(engine.sync_engine, "before_cursor_execute", count_updates)
        try:
            assert await refresh_overall_ranks(db) == 2
            assert updates == []

            newcomer = await make_user("newcomer")
            await record_completion(db, newcomer.id, assignment.id, now=days(2))
            updates.clear()
            await refresh_overall_ranks(db)
        finally:
            event.remove(engine.sync_engine, "before_cursor_execute", count_updates)

        # newcomer takes 2nd and pushes slow to 3rd; fast is untouched
        assert len(updates) == 2
        result = await db.execute(select(User.id, User.rank))
        ranks = dict(result.all())
        assert (ranks[fast.id], ranks[newcomer.id], ranks[slow.id]) == (1, 2, 3)

    async def test_failed_refresh_is_logged_not_raised(self, db, make_user, make_assignment, caplog):
        student = await make_user("amina", rank=7)
        student_id = student.id
        assignment = await make_assignment("Problem set 1", created_at=days(5))
        # Legacy row written before completions were checked against posting time
        db.add(AssignmentCompletion(assignment_id=assignment.id, user_id=student_id, completed_at=days(1)))
        await db.commit()

        assert await refresh_overall_ranks_after_commit(db) is False

        assert "Failed to refresh cached overall ranks" in caplog.text
        assert await db.scalar(select(User.rank).where(User.id == student_id)) == 7
