"""Tests for the encounter state machine and decision intake."""

import pytest

from naval_engine import (
    HexCoord, UnitManager, Encounter, EncounterTracker, EncounterType,
    PassingDecision, EntryDecision, EncounterNotFoundError, EncounterResolvedError,
    UnitNotInEncounterError, WrongEncounterTypeError,
)

A, B, C = "unit_0", "unit_1", "unit_2"
POSITIONS = {A: HexCoord(0, 0), B: HexCoord(1, 0), C: HexCoord(1, 1)}


@pytest.fixture
def tracker():
    return EncounterTracker()


class TestPassing:

    def test_created_awaiting_both_choices(self):
        encounter = Encounter.create_passing("encounter_0", 1, B, A, POSITIONS)

        assert encounter.involved_unit_ids == [A, B]
        assert encounter.edge == (HexCoord(0, 0), HexCoord(1, 0))
        assert encounter.passing_decisions == {A: PassingDecision.NONE, B: PassingDecision.NONE}
        assert encounter.awaiting_player_choices

    def test_decisions_compose_in_any_order(self):
        encounter = Encounter.create_passing("encounter_0", 1, A, B, POSITIONS)
        encounter.record_passing_decision(B, PassingDecision.ATTACK)
        assert encounter.awaiting_player_choices
        encounter.record_passing_decision(A, PassingDecision.PROCEED)

        assert not encounter.awaiting_player_choices
        assert encounter.attacking_unit_ids() == [B]

    def test_entry_decision_rejected(self):
        encounter = Encounter.create_passing("encounter_0", 1, A, B, POSITIONS)
        with pytest.raises(WrongEncounterTypeError):
            encounter.record_entry_decision(A, EntryDecision.YIELD)

    def test_outsider_rejected(self):
        encounter = Encounter.create_passing("encounter_0", 1, A, B, POSITIONS)
        with pytest.raises(UnitNotInEncounterError):
            encounter.record_passing_decision(C, PassingDecision.PROCEED)

    def test_cannot_be_contested(self):
        encounter = Encounter.create_passing("encounter_0", 1, A, B, POSITIONS)
        with pytest.raises(WrongEncounterTypeError):
            encounter.mark_as_contested()


class TestEntry:

    def test_needs_two_units(self):
        with pytest.raises(ValueError):
            Encounter.create_entry("encounter_0", 1, HexCoord(2, 0), [A], POSITIONS)

    def test_contested_resets_attackers_only(self):
        encounter = Encounter.create_entry("encounter_0", 1, HexCoord(1, -1), [C, A, B], POSITIONS)
        encounter.record_entry_decision(A, EntryDecision.ATTACK)
        encounter.record_entry_decision(B, EntryDecision.YIELD)
        encounter.record_entry_decision(C, EntryDecision.ATTACK)
        assert encounter.attacking_unit_ids() == [A, C]

        encounter.mark_as_contested()

        assert encounter.is_contested
        assert not encounter.is_resolved
        assert encounter.entry_decisions == {
            A: EntryDecision.NONE, B: EntryDecision.YIELD, C: EntryDecision.NONE,
        }
        assert encounter.awaiting_player_choices

    def test_passing_decision_rejected(self):
        encounter = Encounter.create_entry("encounter_0", 1, HexCoord(1, -1), [A, B], POSITIONS)
        with pytest.raises(WrongEncounterTypeError):
            encounter.record_passing_decision(A, PassingDecision.ATTACK)

    def test_owner_helpers(self):
        units = UnitManager()
        units.create_unit(0, POSITIONS[A])
        units.create_unit(0, POSITIONS[B])
        units.create_unit(1, POSITIONS[C])

        friendly = Encounter.create_entry("encounter_0", 1, HexCoord(1, -1), [A, B], POSITIONS)
        mixed = Encounter.create_entry("encounter_1", 1, HexCoord(1, -1), [A, C], POSITIONS)

        assert friendly.are_all_units_from_same_player(units)
        assert not mixed.are_all_units_from_same_player(units)
        assert mixed.get_involved_owner_ids(units) == {0, 1}

    def test_resolved_encounter_is_not_awaiting(self):
        encounter = Encounter.create_entry("encounter_0", 1, HexCoord(1, -1), [A, B], POSITIONS)
        encounter.mark_as_resolved()
        assert not encounter.awaiting_player_choices


class TestTracker:

    def test_ids_are_sequential(self, tracker):
        first = tracker.open_passing(1, A, B, POSITIONS)
        second = tracker.open_entry(1, HexCoord(2, -1), [B, C], POSITIONS)
        assert (first.id, second.id) == ("encounter_0", "encounter_1")

    def test_resolution_order(self, tracker):
        passing = tracker.open_passing(1, A, B, POSITIONS)
        entry = tracker.open_entry(1, HexCoord(-1, 0), [A, C], POSITIONS)
        assert tracker.active_encounters() == [entry, passing]

    def test_submit_accepts_enum_or_value(self, tracker):
        encounter = tracker.open_passing(1, A, B, POSITIONS)
        tracker.submit_decision(encounter.id, A, PassingDecision.PROCEED)
        tracker.submit_decision(encounter.id, B, "attack")

        assert encounter.passing_decisions[B] == PassingDecision.ATTACK
        assert tracker.ready_encounters() == [encounter]

    def test_submit_rejects_bad_input(self, tracker):
        encounter = tracker.open_passing(1, A, B, POSITIONS)

        with pytest.raises(EncounterNotFoundError):
            tracker.submit_decision("encounter_9", A, "proceed")
        with pytest.raises(UnitNotInEncounterError):
            tracker.submit_decision(encounter.id, C, "proceed")
        with pytest.raises(WrongEncounterTypeError):
            tracker.submit_decision(encounter.id, A, "yield")

        encounter.mark_as_resolved()
        with pytest.raises(EncounterResolvedError):
            tracker.submit_decision(encounter.id, A, "proceed")

    def test_decision_from_the_other_family_is_refused(self, tracker):
        passing = tracker.open_passing(1, A, B, POSITIONS)
        entry = tracker.open_entry(1, HexCoord(2, -1), [B, C], POSITIONS)

        with pytest.raises(WrongEncounterTypeError):
            tracker.submit_decision(passing.id, A, EntryDecision.ATTACK)
        with pytest.raises(WrongEncounterTypeError):
            tracker.submit_decision(passing.id, A, EntryDecision.NONE)
        with pytest.raises(WrongEncounterTypeError):
            tracker.submit_decision(entry.id, B, PassingDecision.ATTACK)

        assert passing.passing_decisions[A] == PassingDecision.NONE
        assert entry.entry_decisions == {B: EntryDecision.NONE, C: EntryDecision.NONE}

    def test_errors_carry_the_encounter_id(self, tracker):
        with pytest.raises(EncounterNotFoundError) as excinfo:
            tracker.submit_decision("encounter_9", A, "proceed")

        assert excinfo.value.context == {"encounter_id": "encounter_9"}
        assert str(excinfo.value) == "Encounter encounter_9 does not exist [encounter_id=encounter_9]"

    def test_lookups(self, tracker):
        entry = tracker.open_entry(1, HexCoord(2, -1), [B, C], POSITIONS)
        assert tracker.encounter_for_unit(C) is entry
        assert tracker.encounter_for_unit(A) is None
        assert tracker.entry_encounter_at(HexCoord(2, -1)) is entry

        entry.mark_as_resolved()
        assert tracker.entry_encounter_at(HexCoord(2, -1)) is None
        assert tracker.discard_resolved() == 1
        assert tracker.get(entry.id) is None

    def test_dict_round_trip(self, tracker):
        paths = {A: [HexCoord(0, 0), HexCoord(1, -1)], C: [HexCoord(1, 1), HexCoord(1, 0), HexCoord(1, -1)]}
        entry = tracker.open_entry(3, HexCoord(1, -1), [A, C], POSITIONS, paths)
        tracker.submit_decision(entry.id, A, EntryDecision.ATTACK)

        restored = EncounterTracker.from_dict(tracker.to_dict())
        copy = restored.get(entry.id)

        assert copy.to_dict() == entry.to_dict()
        assert copy.unit_paths[C][-1] == HexCoord(1, -1)
        assert restored.open_passing(4, A, B, POSITIONS).id == "encounter_1"
