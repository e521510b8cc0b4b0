"""Tests for the per-candidate scoring functions."""

import pytest

from task_recommender.config import ScoringConfig
from task_recommender.models import Employee, Seniority
from task_recommender.scorer import (
    required_seniority,
    score_capacity,
    score_employee,
    score_seniority,
    score_skill_overlap,
)
from tests.factories import make_employee, make_task


class TestScoreSkillOverlap:
    """Tests for case-insensitive skill overlap."""

    def test_empty_task_skills_is_full_match(self) -> None:
        result = score_skill_overlap([], ["Python"])
        assert result.score == 1.0
        assert result.matched == ()
        assert result.missing == ()

    def test_partial_overlap(self) -> None:
        result = score_skill_overlap(
            ["React", "TypeScript", "Node.js"], ["React", "TypeScript", "Python"]
        )
        assert result.score == pytest.approx(2 / 3)
        assert result.matched == ("React", "TypeScript")
        assert result.missing == ("Node.js",)

    def test_matching_ignores_case_but_keeps_task_casing(self) -> None:
        result = score_skill_overlap(["PostgreSQL", "Docker"], ["postgresql", "DOCKER"])
        assert result.score == 1.0
        assert result.matched == ("PostgreSQL", "Docker")

    def test_matched_and_missing_partition_task_skills(self) -> None:
        task_skills = ["Go", "gRPC", "Kafka", "Redis"]
        result = score_skill_overlap(task_skills, ["kafka", "go"])
        assert set(result.matched) | set(result.missing) == set(task_skills)
        assert not set(result.matched) & set(result.missing)
        assert result.score == 0.5

    def test_no_candidate_skills(self) -> None:
        result = score_skill_overlap(["Python", "Airflow"], [])
        assert result.score == 0.0
        assert result.missing == ("Python", "Airflow")


class TestScoreCapacity:
    """Tests for capacity fitness."""

    def test_full_fit_prefers_less_loaded(self) -> None:
        light = score_capacity(40, 10, 4)
        heavy = score_capacity(40, 30, 4)
        assert light.score == pytest.approx(0.875)
        assert heavy.score == pytest.approx(0.625)
        assert light.available_capacity == 30

    def test_idle_candidate_scores_one(self) -> None:
        assert score_capacity(40, 0, 8).score == 1.0

    def test_partial_fit(self) -> None:
        result = score_capacity(40, 38, 8)
        assert result.score == pytest.approx(0.25)
        assert result.available_capacity == 2

    def test_over_committed_scores_zero(self) -> None:
        result = score_capacity(35, 40, 4)
        assert result.score == 0.0
        assert result.available_capacity == 0.0

    def test_exactly_full_scores_zero(self) -> None:
        assert score_capacity(40, 40, 1).score == 0.0

    def test_zero_capacity_does_not_divide(self) -> None:
        result = score_capacity(0, 0, 4)
        assert result.score == 0.0
        assert result.available_capacity == 0.0

    def test_zero_effort_task(self) -> None:
        result = score_capacity(40, 20, 0)
        assert result.score == pytest.approx(0.75)

    def test_negative_commitment_is_clamped(self) -> None:
        result = score_capacity(40, -10, 4)
        assert result.available_capacity == 40
        assert result.score == 1.0


class TestSeniority:
    """Tests for the seniority heuristic."""

    def test_required_tiers(self) -> None:
        assert required_seniority(8, 3) == Seniority.SENIOR
        assert required_seniority(6, 2) == Seniority.MID
        assert required_seniority(4, 1) == Seniority.MID
        assert required_seniority(2, 2) == Seniority.MID
        assert required_seniority(2, 1) == Seniority.JUNIOR
        assert required_seniority(8, 1) == Seniority.MID

    def test_exact_match(self) -> None:
        assert score_seniority(4, 2, Seniority.MID) == 1.0

    def test_over_qualified(self) -> None:
        assert score_seniority(1, 0, Seniority.SENIOR) == 0.8

    def test_under_qualified(self) -> None:
        assert score_seniority(8, 3, Seniority.JUNIOR) == 0.5


class TestScoreEmployee:
    """Tests for the weighted total."""

    def test_worked_example(self) -> None:
        employee = make_employee(
            skills=("React", "TypeScript", "Node.js"),
            capacity=40,
            committed=10,
            seniority=Seniority.MID,
        )
        score = score_employee(employee, make_task(skills=("React", "TypeScript"), effort=4))

        assert score.skill_overlap_score == 1.0
        assert score.capacity_score == pytest.approx(0.875)
        assert score.seniority_score == 1.0
        assert score.total_score == pytest.approx(0.9625)
        assert score.skills_matched == ("React", "TypeScript")
        assert score.available_capacity == 30

    def test_missing_profile_scores_zero(self) -> None:
        employee = Employee(user_id="emp-x", name="No Profile")
        score = score_employee(employee, make_task())
        assert score.total_score == 0.0
        assert score.skills_matched == ()
        assert score.available_capacity == 0.0

    def test_custom_weights(self) -> None:
        config = ScoringConfig(skill_weight=1.0, capacity_weight=0.0, seniority_weight=0.0)
        employee = make_employee(skills=("React",), capacity=0)
        score = score_employee(employee, make_task(skills=("React", "Go")), config)
        assert score.total_score == pytest.approx(0.5)

    @pytest.mark.parametrize(
        ("capacity", "committed", "effort", "seniority"),
        [
            (40, 0, 8, Seniority.SENIOR),
            (0, 0, 0, Seniority.JUNIOR),
            (10, 50, 8, Seniority.MID),
            (40, 39.5, 8, Seniority.JUNIOR),
        ],
    )
    def test_total_stays_in_unit_interval(self, capacity, committed, effort, seniority) -> None:
        employee = make_employee(capacity=capacity, committed=committed, seniority=seniority)
        score = score_employee(employee, make_task(effort=effort))
        assert 0.0 <= score.total_score <= 1.0
        assert 0.0 <= score.available_capacity <= max(capacity, 0)


class TestScoringConfig:
    """Tests for the tunable policy struct."""

    def test_weights_must_sum_to_one(self) -> None:
        with pytest.raises(ValueError):
            ScoringConfig(skill_weight=0.5, capacity_weight=0.5, seniority_weight=0.5)

    def test_candidate_cap_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            ScoringConfig(max_candidates_returned=0)
