#!/usr/bin/env python3
"""
Unit tests for ideation_workshop/evaluations.py - EvaluationStore
"""

import itertools
import json
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, '.')
from ideation_workshop.catalog import CardCatalog
from ideation_workshop.evaluations import MAX_SELECTED_CRITERIA, EvaluationStore
from ideation_workshop.models import CriteriaCard, EvaluationCriteria
from ideation_workshop.storage import MemoryStorage


def criteria(card_id, name="Utility"):
    return CriteriaCard(id=card_id, type="Criteria", name=name, question=f"{name}?")


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def evaluations(storage):
    return EvaluationStore(storage, clock=lambda: 1000)


class TestSelectedCriteria:
    """Tests for update_selected_criteria and toggle_criteria."""

    def test_update_replaces(self, evaluations):
        evaluations.update_selected_criteria("i1", ["c1", "c2"])
        evaluations.update_selected_criteria("i1", ["c3"])
        assert evaluations.selected_criteria("i1") == ["c3"]

    def test_update_stores_whatever_is_given(self, evaluations):
        evaluations.update_selected_criteria("i1", ["c1", "c2", "c3", "c4"])
        assert len(evaluations.selected_criteria("i1")) == 4

    def test_toggle_adds_then_removes(self, evaluations):
        assert evaluations.toggle_criteria("i1", "c1")
        assert evaluations.selected_criteria("i1") == ["c1"]
        assert evaluations.toggle_criteria("i1", "c1")
        assert evaluations.selected_criteria("i1") == []

    def test_toggle_rejects_fourth(self, evaluations):
        for cid in ("c1", "c2", "c3"):
            assert evaluations.toggle_criteria("i1", cid)

        assert not evaluations.toggle_criteria("i1", "c4")
        assert evaluations.selected_criteria("i1") == ["c1", "c2", "c3"]

    def test_cap_holds_for_any_toggle_sequence(self, evaluations):
        ids = ["c1", "c2", "c3", "c4", "c5"]
        for cid in itertools.chain.from_iterable(itertools.permutations(ids, 3)):
            evaluations.toggle_criteria("i1", cid)
            assert len(evaluations.selected_criteria("i1")) <= MAX_SELECTED_CRITERIA

    def test_ideas_are_independent(self, evaluations):
        evaluations.toggle_criteria("i1", "c1")
        assert evaluations.selected_criteria("i2") == []

    def test_persisted_under_fixed_key(self, storage, evaluations):
        evaluations.toggle_criteria("i1", "c1")
        assert json.loads(storage.get("selected_criteria")) == {"i1": ["c1"]}


class TestCriteriaResponses:
    """Tests for update_criteria_responses."""

    def test_creates_evaluation(self, evaluations):
        evaluation = evaluations.update_criteria_responses(
            "i1", [EvaluationCriteria(criteria=criteria("c7"), response="Useful")]
        )
        assert evaluation.idea_id == "i1"
        assert evaluations.get_evaluation("i1") is evaluation

    def test_preserves_id_and_created_at(self, evaluations):
        first = evaluations.update_criteria_responses("i1", [])
        second = evaluations.update_criteria_responses(
            "i1", [EvaluationCriteria(criteria=criteria("c7"), response="Useful")]
        )
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert len(second.criteria) == 1

    def test_default_responses_prefill(self, evaluations):
        evaluations.update_criteria_responses(
            "i1", [EvaluationCriteria(criteria=criteria("c7"), response="Useful")]
        )
        defaults = evaluations.default_responses("i1", [criteria("c7"), criteria("c8", "Enjoyment")])
        assert [(e.criteria.id, e.response) for e in defaults] == [("c7", "Useful"), ("c8", "")]

    def test_reload_from_storage(self, storage, evaluations):
        saved = evaluations.update_criteria_responses(
            "i1", [EvaluationCriteria(criteria=criteria("c7"), response="Useful")]
        )
        evaluations.toggle_criteria("i1", "c7")

        reloaded = EvaluationStore(storage)

        assert reloaded.get_evaluation("i1") == saved
        assert reloaded.selected_criteria("i1") == ["c7"]


class TestCustomCriteria:
    """Tests for custom criteria creation and scoping."""

    def test_id_is_scoped_to_idea(self, evaluations):
        card = evaluations.create_custom_criteria("i1", "Cost", "Cheap to build")
        assert card.id == "custom-i1-1000"
        assert card.type == "Criteria"

    def test_same_timestamp_does_not_collide(self, evaluations):
        first = evaluations.create_custom_criteria("i1", "Cost")
        second = evaluations.create_custom_criteria("i1", "Speed")
        assert first.id != second.id

    def test_filtered_per_idea(self, evaluations):
        evaluations.create_custom_criteria("i1", "Cost")
        evaluations.create_custom_criteria("i2", "Speed")
        assert [c.name for c in evaluations.custom_criteria("i1")] == ["Cost"]

    def test_criteria_for_idea_appends_custom(self, evaluations):
        catalog = CardCatalog()
        custom = evaluations.create_custom_criteria("i1", "Cost")
        available = evaluations.criteria_for_idea("i1", catalog)
        assert available[-1] == custom
        assert "c10" not in [c.id for c in available]
        assert len(available) == 10

    def test_selected_cards_resolves_custom(self, evaluations):
        catalog = CardCatalog()
        custom = evaluations.create_custom_criteria("i1", "Cost")
        evaluations.toggle_criteria("i1", "c1")
        evaluations.toggle_criteria("i1", custom.id)
        names = [c.name for c in evaluations.selected_cards("i1", catalog)]
        assert names == ["Sustainability", "Cost"]


class TestForgetIdea:
    """Tests for forget_idea."""

    def test_removes_all_buckets(self, storage, evaluations):
        evaluations.toggle_criteria("i1", "c1")
        evaluations.update_criteria_responses("i1", [])
        evaluations.create_custom_criteria("i1", "Cost")

        evaluations.forget_idea("i1")

        assert evaluations.selected_criteria("i1") == []
        assert evaluations.get_evaluation("i1") is None
        assert evaluations.custom_criteria("i1") == []
        assert json.loads(storage.get("evaluations")) == {}


class TestPersistenceFailures:
    """Tests for storage failure handling."""

    def test_write_failure_is_logged(self):
        class FailingStorage(MemoryStorage):
            def set(self, key, value):
                raise OSError("disk full")

        logger = MagicMock()
        evaluations = EvaluationStore(FailingStorage(), logger)

        assert evaluations.toggle_criteria("i1", "c1")
        assert evaluations.selected_criteria("i1") == ["c1"]
        logger.log_error.assert_called_once()

    def test_corrupted_data_loads_empty(self):
        evaluations = EvaluationStore(MemoryStorage({"selected_criteria": "oops"}))
        assert evaluations.selected_criteria("i1") == []

    def test_malformed_evaluation_entry_loads_empty(self):
        logger = MagicMock()
        evaluations = EvaluationStore(MemoryStorage({"evaluations": '{"i1": {}}'}), logger)

        assert evaluations.get_evaluation("i1") is None
        logger.log_error.assert_called_once()

    def test_malformed_selected_entry_is_dropped(self):
        # given
        stored = {"selected_criteria": '{"i1": 5, "i2": ["c1", 7], "i3": ["c2"]}'}

        # when
        evaluations = EvaluationStore(MemoryStorage(stored))

        # then
        assert evaluations.selected_criteria("i1") == []
        assert evaluations.selected_criteria("i2") == []
        assert evaluations.selected_criteria("i3") == ["c2"]
        assert evaluations.toggle_criteria("i1", "c1")
        assert evaluations.selected_criteria("i1") == ["c1"]

    def test_wrong_shape_custom_criteria_loads_empty(self):
        logger = MagicMock()
        evaluations = EvaluationStore(MemoryStorage({"custom_criteria": '{"i1": ["oops"]}'}), logger)

        assert evaluations.custom_criteria("i1") == []
        logger.log_error.assert_called_once()
