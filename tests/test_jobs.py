"""
Tests for jobs.py - the jobs repository against a real SQLite database.
"""

import pytest
from decimal import Decimal

from jobboard import jobs
from jobboard.exceptions import InvalidChangeSet, NotFound, ValidationError
from jobboard.query import FilterCriteria


def _titles(rows):
    return [row["title"] for row in rows]


def _matches(job, title, min_salary, has_equity):
    if title is not None and title.casefold() not in job["title"].casefold():
        return False
    if min_salary is not None and (job["salary"] is None or job["salary"] < min_salary):
        return False
    if has_equity and not (job["equity"] is not None and job["equity"] > 0):
        return False
    return True


class TestFindAll:
    """Test filtered listing."""

    def test_no_filters_returns_all_sorted_by_title(self, seeded_engine):
        result = jobs.find_all(seeded_engine)
        assert _titles(result) == [
            "Data Engineer",
            "Mechanical Engineering Lead",
            "Product Manager",
            "Senior engineer",
            "Software Engineer",
        ]

    def test_all_filters(self, seeded_engine):
        """engineer + min 80000 + equity keeps only the two matching jobs."""
        result = jobs.find_all(
            seeded_engine,
            FilterCriteria(title="engineer", min_salary=80000, has_equity=True),
        )
        assert _titles(result) == ["Senior engineer", "Software Engineer"]
        assert [r["id"] for r in result] == [5, 1]

    def test_title_case_insensitive_substring(self, seeded_engine):
        result = jobs.find_all(seeded_engine, FilterCriteria(title="eng"))
        assert _titles(result) == [
            "Data Engineer",
            "Mechanical Engineering Lead",
            "Senior engineer",
            "Software Engineer",
        ]

    def test_min_salary_inclusive(self, seeded_engine):
        result = jobs.find_all(seeded_engine, FilterCriteria(min_salary=80000))
        assert 2 in [r["id"] for r in result]
        assert 5 in [r["id"] for r in result]
        assert 3 not in [r["id"] for r in result]

    def test_has_equity_excludes_zero_and_null(self, seeded_engine):
        result = jobs.find_all(seeded_engine, FilterCriteria(has_equity=True))
        assert sorted(r["id"] for r in result) == [1, 3, 5]

    def test_has_equity_false_filters_nothing(self, seeded_engine):
        result = jobs.find_all(seeded_engine, FilterCriteria(has_equity=False))
        assert len(result) == 5

    @pytest.mark.parametrize("title", [None, "ENGINEER"])
    @pytest.mark.parametrize("min_salary", [None, 80000])
    @pytest.mark.parametrize("has_equity", [None, False, True])
    def test_every_combination_runs(self, seeded_engine, seed_jobs, title, min_salary, has_equity):
        """Each compiled query executes and returns exactly the matching jobs."""
        result = jobs.find_all(seeded_engine, FilterCriteria(title, min_salary, has_equity))

        expected = sorted(
            (j for j in seed_jobs if _matches(j, title, min_salary, has_equity)),
            key=lambda j: j["title"],
        )
        assert [r["id"] for r in result] == [j["id"] for j in expected]

    def test_raw_mapping_is_validated(self, seeded_engine):
        result = jobs.find_all(seeded_engine, {"title": "manager"})
        assert _titles(result) == ["Product Manager"]

    def test_wrong_type_rejected(self, seeded_engine):
        """A string salary is an error, not an absent filter."""
        with pytest.raises(ValidationError) as exc_info:
            jobs.find_all(seeded_engine, {"min_salary": "80000"})
        assert any("min_salary" in e for e in exc_info.value.errors)

    def test_percent_in_title_matches_literally(self, seeded_engine):
        jobs.create(
            seeded_engine,
            {"title": "100% Remote Engineer", "company_handle": "acme"},
        )
        result = jobs.find_all(seeded_engine, FilterCriteria(title="%"))
        assert _titles(result) == ["100% Remote Engineer"]

    def test_title_match_folds_non_ascii(self, seeded_engine):
        """Case folding covers accented letters, not just ASCII."""
        jobs.create(
            seeded_engine,
            {"title": "Ingénieur Logiciel", "company_handle": "acme"},
        )
        result = jobs.find_all(seeded_engine, FilterCriteria(title="INGÉNIEUR"))
        assert _titles(result) == ["Ingénieur Logiciel"]

    def test_rows_are_shaped(self, seeded_engine):
        job = jobs.find_all(seeded_engine, FilterCriteria(title="software"))[0]
        assert job == {
            "id": 1,
            "title": "Software Engineer",
            "salary": 120000,
            "equity": Decimal("0.05"),
            "company_handle": "acme",
        }


class TestCreate:
    """Test job creation."""

    def test_create_assigns_next_id(self, seeded_engine):
        job = jobs.create(
            seeded_engine,
            {"title": "QA Engineer", "salary": 60000, "equity": Decimal("0.001"),
             "company_handle": "delta"},
        )
        assert job["id"] == 6
        assert job["title"] == "QA Engineer"
        assert job["equity"] == Decimal("0.001")
        assert jobs.get(seeded_engine, 6) == job

    def test_create_optional_fields_null(self, seeded_engine):
        job = jobs.create(seeded_engine, {"title": "Intern", "company_handle": "beta"})
        assert job["salary"] is None
        assert job["equity"] is None

    def test_ids_not_reused_after_delete(self, seeded_engine):
        first = jobs.create(seeded_engine, {"title": "Temp", "company_handle": "acme"})
        jobs.remove(seeded_engine, first["id"])
        second = jobs.create(seeded_engine, {"title": "Temp", "company_handle": "acme"})
        assert second["id"] > first["id"]

    def test_unknown_company_rejected(self, seeded_engine):
        with pytest.raises(ValidationError) as exc_info:
            jobs.create(seeded_engine, {"title": "Ghost", "company_handle": "nope"})
        assert "nope" in exc_info.value.message
        assert len(jobs.find_all(seeded_engine)) == 5

    def test_invalid_data_rejected(self, seeded_engine):
        with pytest.raises(ValidationError) as exc_info:
            jobs.create(
                seeded_engine,
                {"title": "", "salary": -1, "equity": 2, "company_handle": "acme"},
            )
        assert len(exc_info.value.errors) == 3


class TestGet:
    """Test single-job lookup."""

    def test_get(self, seeded_engine):
        job = jobs.get(seeded_engine, 4)
        assert job["title"] == "Product Manager"
        assert job["equity"] is None

    def test_get_missing(self, seeded_engine):
        with pytest.raises(NotFound):
            jobs.get(seeded_engine, 999)

    def test_get_non_integer_id(self, seeded_engine):
        with pytest.raises(ValidationError):
            jobs.get(seeded_engine, "1; DROP TABLE jobs")


class TestFindByCompany:
    """Test lookup by company handle."""

    def test_jobs_of_company_sorted(self, seeded_engine):
        result = jobs.find_by_company(seeded_engine, "acme")
        assert _titles(result) == ["Data Engineer", "Software Engineer"]
        assert all(r["company_handle"] == "acme" for r in result)

    def test_company_without_jobs_is_empty(self, seeded_engine):
        assert jobs.find_by_company(seeded_engine, "delta") == []

    def test_unknown_company_not_found(self, seeded_engine):
        with pytest.raises(NotFound) as exc_info:
            jobs.find_by_company(seeded_engine, "nope")
        assert exc_info.value.details == {"handle": "nope"}


class TestUpdate:
    """Test partial updates."""

    def test_update_salary_keeps_other_fields(self, seeded_engine):
        job = jobs.update(seeded_engine, 3, {"salary": 95000})
        assert job == {
            "id": 3,
            "title": "Data Engineer",
            "salary": 95000,
            "equity": Decimal("0.01"),
            "company_handle": "acme",
        }
        assert jobs.get(seeded_engine, 3) == job

    def test_update_several_fields(self, seeded_engine):
        job = jobs.update(
            seeded_engine, 4, {"title": "Senior PM", "equity": Decimal("0.2")}
        )
        assert job["title"] == "Senior PM"
        assert job["equity"] == Decimal("0.2")
        assert job["salary"] == 130000

    def test_clear_nullable_field(self, seeded_engine):
        job = jobs.update(seeded_engine, 1, {"equity": None})
        assert job["equity"] is None

    def test_update_only_touches_target_row(self, seeded_engine):
        jobs.update(seeded_engine, 3, {"salary": 1})
        assert jobs.get(seeded_engine, 1)["salary"] == 120000

    def test_update_missing_job(self, seeded_engine):
        with pytest.raises(NotFound):
            jobs.update(seeded_engine, 999, {"salary": 1})

    def test_update_empty(self, seeded_engine):
        with pytest.raises(InvalidChangeSet):
            jobs.update(seeded_engine, 1, {})

    def test_company_handle_immutable(self, seeded_engine):
        with pytest.raises(InvalidChangeSet):
            jobs.update(seeded_engine, 1, {"company_handle": "beta"})
        assert jobs.get(seeded_engine, 1)["company_handle"] == "acme"

    def test_id_immutable(self, seeded_engine):
        with pytest.raises(InvalidChangeSet):
            jobs.update(seeded_engine, 1, {"id": 42})

    def test_wrong_type_rejected(self, seeded_engine):
        with pytest.raises(ValidationError):
            jobs.update(seeded_engine, 1, {"salary": "lots"})
        assert jobs.get(seeded_engine, 1)["salary"] == 120000


class TestRemove:
    """Test deletion."""

    def test_remove(self, seeded_engine):
        jobs.remove(seeded_engine, 2)
        with pytest.raises(NotFound):
            jobs.get(seeded_engine, 2)
        assert len(jobs.find_all(seeded_engine)) == 4

    def test_remove_missing(self, seeded_engine):
        with pytest.raises(NotFound):
            jobs.remove(seeded_engine, 999)


class TestCreateCompany:
    """Test company creation."""

    def test_create_company(self, engine):
        company = jobs.create_company(engine, {"handle": "omega", "name": "Omega"})
        assert company == {
            "handle": "omega",
            "name": "Omega",
            "description": None,
            "num_employees": None,
            "logo_url": None,
        }
        assert jobs.find_by_company(engine, "omega") == []

    def test_duplicate_company(self, seeded_engine):
        with pytest.raises(ValidationError):
            jobs.create_company(seeded_engine, {"handle": "acme", "name": "Another"})


class TestMetrics:
    """Repository operations feed the logger metrics."""

    def test_statements_recorded(self, seeded_engine, test_logger):
        jobs.find_all(seeded_engine)
        with pytest.raises(NotFound):
            jobs.remove(seeded_engine, 999)

        metrics = test_logger.get_metrics()
        assert metrics["operations"]["find_all"]["rows"] == 5
        assert metrics["operations"]["remove"]["statements"] == 1
        assert metrics["not_found"] == 1
