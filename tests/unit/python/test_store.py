#!/usr/bin/env python3
"""
Unit tests for ideation_workshop/store.py - WorkshopStore

Tests for:
- Workshop CRUD and idea cascade on delete
- Idea creation precondition (current workshop)
- Current pointers resolving to live objects
- Persistence: round-trip, corrupted data, write failures
"""

import json
import sys
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, '.')
from ideation_workshop.models import Card, CardCategory, CardCombination, MissionCard, WorkshopPhase
from ideation_workshop.storage import JsonFileStorage, MemoryStorage
from ideation_workshop.store import NoCurrentWorkshopError, WorkshopStore


class FailingStorage(MemoryStorage):
    def set(self, key, value):
        raise OSError("quota exceeded")


@pytest.fixture
def store():
    return WorkshopStore(MemoryStorage())


def store_with_workshop(name="Demo"):
    store = WorkshopStore(MemoryStorage())
    workshop = store.create_workshop(name)
    store.set_current_workshop(workshop)
    return store, workshop


class TestCreateWorkshop:
    """Tests for create_workshop."""

    def test_assigns_id_and_timestamps(self, store):
        workshop = store.create_workshop("Demo", facilitator_name="Sam")
        assert workshop.id
        assert workshop.created_at == workshop.updated_at
        assert store.workshops == [workshop]

    def test_ids_are_unique(self, store):
        first = store.create_workshop("A")
        second = store.create_workshop("B")
        assert first.id != second.id

    def test_persists_immediately(self):
        storage = MemoryStorage()
        WorkshopStore(storage).create_workshop("Demo")
        assert json.loads(storage.get("workshops"))[0]["name"] == "Demo"

    def test_context_cards_are_snapshots(self, store):
        mission = MissionCard(id="m1", type="Mission", name="Time-saver", goal="Save time")
        workshop = store.create_workshop("Demo", mission=mission)
        mission.goal = "changed"
        assert workshop.mission.goal == "Save time"


class TestUpdateWorkshop:
    """Tests for update_workshop."""

    def test_merges_fields(self, store):
        workshop = store.create_workshop("Demo")
        updated = store.update_workshop(workshop.id, description="New description")
        assert updated.description == "New description"
        assert updated.name == "Demo"

    def test_unknown_id_is_noop(self, store):
        assert store.update_workshop("missing", name="x") is None

    def test_ignores_protected_and_unknown_fields(self, store):
        workshop = store.create_workshop("Demo")
        store.update_workshop(workshop.id, id="hijack", nonsense=1)
        assert store.get_workshop(workshop.id) is workshop
        assert not hasattr(workshop, "nonsense")

    def test_current_pointer_reflects_update(self):
        store, workshop = store_with_workshop()
        store.update_workshop(workshop.id, name="Renamed")
        assert store.current_workshop.name == "Renamed"


class TestDeleteWorkshop:
    """Tests for delete_workshop cascade."""

    def test_cascades_to_own_ideas_only(self):
        # given
        store, workshop = store_with_workshop("A")
        own = [store.create_idea(), store.create_idea()]
        other = store.create_workshop("B")
        store.set_current_workshop(other)
        foreign = store.create_idea()

        # when
        removed = store.delete_workshop(workshop.id)

        # then
        assert sorted(removed) == sorted(idea.id for idea in own)
        assert store.ideas == [foreign]
        assert store.get_workshop(workshop.id) is None

    def test_clears_current_pointers(self):
        store, workshop = store_with_workshop()
        idea = store.create_idea()
        store.set_current_idea(idea)

        store.delete_workshop(workshop.id)

        assert store.current_workshop is None
        assert store.current_idea is None

    def test_unknown_id_is_noop(self, store):
        store.create_workshop("Demo")
        assert store.delete_workshop("missing") == []
        assert len(store.workshops) == 1


class TestCreateIdea:
    """Tests for create_idea."""

    def test_requires_current_workshop(self, store):
        with pytest.raises(NoCurrentWorkshopError):
            store.create_idea(title="Orphan")

    def test_defaults(self):
        store, workshop = store_with_workshop()
        idea = store.create_idea()
        assert idea.workshop_id == workshop.id
        assert idea.title == "New Idea"
        assert idea.card_combination.is_empty()
        assert idea.refinements == []

    def test_workshop_id_cannot_be_overridden(self):
        store, workshop = store_with_workshop()
        idea = store.create_idea(workshop_id="elsewhere", description="d")
        assert idea.workshop_id == workshop.id
        assert idea.description == "d"

    def test_scenario_clothing_with_motion(self):
        # given
        store = WorkshopStore(MemoryStorage())
        persona = Card(id="p3", type="Persona", name="Tourist", description="A tourist")
        mission = MissionCard(id="m1", type="Mission", name="Time-saver", goal="Save time")
        workshop = store.create_workshop("Demo", persona=persona, mission=mission)
        store.set_current_workshop(workshop)
        combination = CardCombination()
        combination.set_cards(CardCategory.THING, [Card(id="t1", type="Thing", name="Clothing")])
        combination.set_cards(CardCategory.SENSOR, [Card(id="s7", type="Sensor", name="Motion")])

        # when
        idea = store.create_idea(description="test", card_combination=combination)

        # then
        assert idea.card_combination.thing.name == "Clothing"
        assert idea.workshop_id == workshop.id


class TestUpdateAndDeleteIdea:
    """Tests for update_idea/delete_idea."""

    def test_update_bumps_updated_at(self):
        store, _ = store_with_workshop()
        idea = store.create_idea()
        idea.updated_at = "2000-01-01T00:00:00"
        store.update_idea(idea.id, title="Renamed")
        assert idea.title == "Renamed"
        assert idea.updated_at != "2000-01-01T00:00:00"

    def test_update_unknown_is_noop(self, store):
        assert store.update_idea("missing", title="x") is None

    def test_delete_clears_current_idea(self):
        store, _ = store_with_workshop()
        idea = store.create_idea()
        store.set_current_idea(idea)
        assert store.delete_idea(idea.id)
        assert store.current_idea is None

    def test_delete_unknown_is_noop(self, store):
        assert store.delete_idea("missing") is False

    def test_current_idea_resolves_live_object(self):
        store, _ = store_with_workshop()
        idea = store.create_idea()
        store.set_current_idea(idea)
        store.update_idea(idea.id, elevator_pitch="Pitch")
        assert store.current_idea.elevator_pitch == "Pitch"


class TestCurrentPointers:
    """Tests for pointer assignment and phase."""

    def test_set_current_workshop_outside_collection(self, store):
        other = WorkshopStore(MemoryStorage()).create_workshop("Elsewhere")
        store.set_current_workshop(other)
        assert store.current_workshop is other

    def test_phase_defaults_to_ideation(self, store):
        assert store.current_phase is WorkshopPhase.IDEATION

    def test_set_phase_without_restrictions(self, store):
        store.set_current_phase(WorkshopPhase.ELEVATOR)
        assert store.current_phase is WorkshopPhase.ELEVATOR


class TestPersistence:
    """Tests for loading and saving state."""

    def test_round_trip_through_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            # given
            store = WorkshopStore(JsonFileStorage(Path(tmpdir)))
            workshop = store.create_workshop("Demo", date="2026-01-09")
            store.set_current_workshop(workshop)
            combination = CardCombination()
            combination.set_cards(CardCategory.THING, [Card(id="t1", type="Thing", name="Clothing")])
            idea = store.create_idea(title="Clothing", description="test", card_combination=combination)

            # when
            reloaded = WorkshopStore(JsonFileStorage(Path(tmpdir)))

            # then
            assert reloaded.workshops == [workshop]
            assert reloaded.ideas == [idea]

    def test_missing_keys_load_empty(self, store):
        assert store.workshops == []
        assert store.ideas == []

    def test_corrupted_data_loads_empty_and_logs(self):
        logger = MagicMock()
        store = WorkshopStore(MemoryStorage({"workshops": "{not json", "ideas": "[{}]"}), logger)
        assert store.workshops == []
        assert store.ideas == []
        assert logger.log_error.call_count == 2

    def test_write_failure_keeps_memory_state(self):
        logger = MagicMock()
        store = WorkshopStore(FailingStorage(), logger)

        workshop = store.create_workshop("Demo")

        assert store.workshops == [workshop]
        logger.log_error.assert_called_once()
        assert "Failed to persist workshops" in logger.log_error.call_args[0][0]

    @pytest.mark.parametrize("stored", [
        {"workshops": '{"w1": {"id": "w1"}}'},
        {"ideas": '[{"id": "i1", "workshopId": "w1", "cardCombination": "x"}]'},
        {"ideas": '["not an idea"]'},
    ])
    def test_wrong_shape_loads_empty_and_logs(self, stored):
        logger = MagicMock()

        store = WorkshopStore(MemoryStorage(stored), logger)

        assert store.workshops == []
        assert store.ideas == []
        logger.log_error.assert_called_once()
        assert "Could not load" in logger.log_error.call_args[0][0]

    def test_read_failure_is_logged(self):
        class UnreadableStorage(MemoryStorage):
            def get(self, key):
                raise PermissionError("denied")

        logger = MagicMock()
        store = WorkshopStore(UnreadableStorage(), logger)

        assert store.workshops == []
        assert logger.log_error.call_count == 2
        assert isinstance(logger.log_error.call_args[0][1], PermissionError)
