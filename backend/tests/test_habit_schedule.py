from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.habit_schedule import (  # noqa: E402
    AutoConfigure,
    CustomSchedule,
    HabitBatchRequest,
    InstructionRef,
    MainEventSchedule,
    assemble,
    default_prep_time,
    generate_defaults,
    resolve_sub_entities,
)
from utils.datetime_utils import ClockTime, Weekday, coerce_clock_time, offset_earlier  # noqa: E402


def _instructions(stable: tuple[bool, ...] = (True, True, True)) -> list[InstructionRef]:
    return [
        InstructionRef(
            recipe_id="recipe-1",
            instruction_number=n,
            instruction_id=f"inst-{n}" if has_id else None,
            text=f"Step {n}",
        )
        for n, has_id in enumerate(stable, start=1)
    ]


def _main_event(time: ClockTime | None = ClockTime(18, 0)) -> MainEventSchedule:
    return MainEventSchedule(weekday=Weekday.WEDNESDAY, start_date=date(2024, 1, 10), time=time)


def test_offset_earlier_keeps_hour_when_minutes_allow():
    for minute in range(30, 60):
        assert offset_earlier(ClockTime(9, minute), 30) == ClockTime(9, minute - 30)


def test_offset_earlier_borrows_an_hour():
    assert offset_earlier(ClockTime(18, 0), 30) == ClockTime(17, 30)
    for minute in range(0, 30):
        assert offset_earlier(ClockTime(12, minute), 30) == ClockTime(11, minute + 30)


def test_offset_earlier_does_not_wrap_past_midnight():
    result = offset_earlier(ClockTime(0, 10), 30)
    assert result == ClockTime(-1, 40)
    assert str(result) == "-1:40"


def test_offset_earlier_rejects_negative_offsets():
    with pytest.raises(ValueError):
        offset_earlier(ClockTime(8, 0), -5)


def test_malformed_times_fall_back_before_offsetting():
    fallback = ClockTime(18, 0)
    assert coerce_clock_time(None, fallback) == fallback
    assert coerce_clock_time("", fallback) == fallback
    assert coerce_clock_time("25:99", fallback) == fallback
    assert coerce_clock_time("soon", fallback) == fallback
    assert coerce_clock_time("07:45", fallback) == ClockTime(7, 45)
    assert str(default_prep_time("garbage")) == "17:30"


def test_generate_defaults_preserves_length_order_and_weekday():
    instructions = _instructions((True, False, True, True))
    defaults = generate_defaults(instructions, _main_event())
    assert [d.instruction for d in defaults] == instructions
    assert all(d.weekday == Weekday.WEDNESDAY for d in defaults)
    assert all(d.time == ClockTime(17, 30) for d in defaults)


def test_generate_defaults_with_no_instructions_is_empty():
    assert generate_defaults([], _main_event()) == []


def test_customization_disabled_always_auto_configures():
    edited = generate_defaults(_instructions(), _main_event())
    assert resolve_sub_entities(False, edited) == AutoConfigure()
    assert resolve_sub_entities(False, [], lambda _ref: True) == AutoConfigure()


def test_empty_edit_list_auto_configures():
    assert resolve_sub_entities(True, []) == AutoConfigure()


def test_all_unstable_instructions_auto_configure():
    edited = generate_defaults(_instructions((False, False)), _main_event())
    assert len(edited) == 2
    assert resolve_sub_entities(True, edited) == AutoConfigure()


def test_custom_predicate_controls_filtering():
    edited = generate_defaults(_instructions(), _main_event())
    resolution = resolve_sub_entities(True, edited, lambda ref: ref.instruction_number == 2)
    assert isinstance(resolution, CustomSchedule)
    assert [e.sub_entity_id for e in resolution.entries] == ["inst-2"]


def test_assemble_never_emits_empty_sub_entities():
    for resolution in (AutoConfigure(), resolve_sub_entities(True, [])):
        request = assemble("meal-1", _main_event(), resolution)
        assert len(request.sub_entities) >= 1
    with pytest.raises(ValidationError):
        HabitBatchRequest(
            entity_id="meal-1",
            target_weekday=Weekday.MONDAY,
            start_date=date(2024, 1, 10),
            sub_entities=[],
        )
    with pytest.raises(ValidationError):
        assemble("meal-1", _main_event(), CustomSchedule(entries=()))


def test_scenario_customization_off_sends_single_placeholder():
    main_event = _main_event()
    request = assemble(
        "meal-1",
        main_event,
        resolve_sub_entities(False, generate_defaults(_instructions(), main_event)),
    )
    assert request.to_payload() == {
        "domain": "meal",
        "entityId": "meal-1",
        "recurrenceType": "weekly",
        "targetWeekday": "wednesday",
        "targetTime": "18:00",
        "startDate": "2024-01-10",
        "subEntities": [{"scheduledWeekday": "wednesday", "scheduledTime": "17:30"}],
    }


def test_scenario_customized_step_keeps_order():
    main_event = _main_event()
    edited = generate_defaults(_instructions(), main_event)
    edited[1] = edited[1].edited(weekday=Weekday.FRIDAY, time=ClockTime(8, 0))

    payload = assemble("meal-1", main_event, resolve_sub_entities(True, edited)).to_payload()

    assert payload["subEntities"] == [
        {"subEntityId": "inst-1", "scheduledWeekday": "wednesday", "scheduledTime": "17:30"},
        {"subEntityId": "inst-2", "scheduledWeekday": "friday", "scheduledTime": "08:00"},
        {"subEntityId": "inst-3", "scheduledWeekday": "wednesday", "scheduledTime": "17:30"},
    ]


def test_scenario_unstable_step_is_dropped_not_auto_configured():
    main_event = _main_event()
    edited = generate_defaults(_instructions((False, True, True)), main_event)
    edited[1] = edited[1].edited(weekday=Weekday.FRIDAY, time=ClockTime(8, 0))

    payload = assemble("meal-1", main_event, resolve_sub_entities(True, edited)).to_payload()

    assert [s["subEntityId"] for s in payload["subEntities"]] == ["inst-2", "inst-3"]
    assert payload["subEntities"][0]["scheduledWeekday"] == "friday"


def test_missing_main_time_uses_fallback_everywhere():
    main_event = _main_event(time=None)
    defaults = generate_defaults(_instructions(), main_event)
    assert {str(d.time) for d in defaults} == {"17:30"}

    payload = assemble("meal-1", main_event, AutoConfigure()).to_payload()
    assert "targetTime" not in payload
    assert payload["subEntities"] == [{"scheduledWeekday": "wednesday", "scheduledTime": "17:30"}]


def test_instruction_key_falls_back_to_recipe_and_step():
    ref = InstructionRef.from_meal_instruction(
        {"recipeId": "r-9", "instructionNumber": 4, "instruction": "Marinate"}
    )
    assert ref.key == "r-9-4"
    assert not ref.has_stable_id
    stable = InstructionRef.from_meal_instruction(
        {"id": "abc", "recipeId": "r-9", "instructionNumber": 4, "instruction": "Marinate"}
    )
    assert stable.key == "abc"
    assert stable.has_stable_id
