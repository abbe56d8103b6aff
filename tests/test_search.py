"""Tests for title search and query suggestions."""

import pytest
from sqlalchemy import func, select

from student_tracker.db.models import SearchQuery, Unit
from student_tracker.services.exceptions import NotFoundError, ValidationError
from student_tracker.services.search import search_content, search_suggestions
from tests.factories import auth_headers


class TestSearchContent:
    """Tests for search_content."""

    async def test_matches_titles_across_types(self, db, make_user, make_note, make_paper, make_assignment):
        student = await make_user("amina")
        await make_note("Integration by parts")
        await make_paper("Integration finals", year="2022")
        await make_assignment("Integrals problem set")
        await make_note("Limits")

        results = await search_content(db, student.id, "integ")

        assert sorted((r.type, r.title) for r in results) == [
            ("assignment", "Integrals problem set"),
            ("note", "Integration by parts"),
            ("pastpaper", "Integration finals"),
        ]

    async def test_filters_by_type_and_unit(self, db, make_user, make_note, make_paper, unit):
        db.add(Unit(unit_code="PHY 1101", name="Mechanics", category="Physics"))
        await db.commit()
        student = await make_user("amina")
        await make_note("Vectors")
        await make_note("Vectors in motion", unit_code="PHY 1101")
        await make_paper("Vectors paper")

        notes_only = await search_content(db, student.id, "vectors", content_type="notes")
        in_unit = await search_content(db, student.id, "vectors", unit_code="PHY 1101")

        assert {r.type for r in notes_only} == {"note"}
        assert len(notes_only) == 2
        assert [r.title for r in in_unit] == ["Vectors in motion"]

    async def test_wildcards_match_literally(self, db, make_user, make_note):
        student = await make_user("amina")
        await make_note("100% pass guide")
        await make_note("1000 practice questions")

        results = await search_content(db, student.id, "100%")

        assert [r.title for r in results] == ["100% pass guide"]

    async def test_records_each_search(self, db, make_user, make_note):
        student = await make_user("amina")
        await make_note("Limits")

        await search_content(db, student.id, "limits")
        await search_content(db, student.id, "nothing here")
        await db.commit()

        rows = (await db.execute(select(SearchQuery.query, SearchQuery.result_count))).all()
        assert sorted(rows) == [("limits", 1), ("nothing here", 0)]

    async def test_blank_query_rejected(self, db, make_user):
        student = await make_user("amina")

        with pytest.raises(ValidationError):
            await search_content(db, student.id, "   ")

    async def test_unknown_type_rejected(self, db, make_user):
        student = await make_user("amina")

        with pytest.raises(ValidationError):
            await search_content(db, student.id, "limits", content_type="videos")

    async def test_unknown_unit(self, db, make_user):
        student = await make_user("amina")

        with pytest.raises(NotFoundError):
            await search_content(db, student.id, "limits", unit_code="NOPE 0000")


class TestSearchSuggestions:
    """Tests for search_suggestions."""

    async def test_most_frequent_prefix_matches_first(self, db, make_user):
        student = await make_user("amina")
        for query in ("limits", "linear algebra", "linear algebra", "series"):
            await search_content(db, student.id, query)

        suggestions = await search_suggestions(db, "Li")

        assert suggestions == ["linear algebra", "limits"]
        assert await db.scalar(select(func.count(SearchQuery.id))) == 4

    async def test_blank_prefix_rejected(self, db):
        with pytest.raises(ValidationError):
            await search_suggestions(db, " ")


async def test_search_endpoints(client, make_user, make_note, unit):
    student = await make_user("amina")
    await make_note("Limits")

    response = await client.get(
        "/search",
        params={"query": "lim", "type": "notes", "unit_code": unit.unit_code},
        headers=auth_headers(student),
    )

    assert response.status_code == 200
    assert [(r["type"], r["title"]) for r in response.json()["results"]] == [("note", "Limits")]

    suggestions = await client.get(
        "/search/suggestions", params={"query": "l"}, headers=auth_headers(student)
    )
    assert suggestions.json() == {"suggestions": ["lim"]}


async def test_search_rejects_unknown_type(client, make_user):
    student = await make_user("amina")

    response = await client.get(
        "/search", params={"query": "lim", "type": "videos"}, headers=auth_headers(student)
    )

    assert response.status_code == 422
