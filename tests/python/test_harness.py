"""Tests for batch verification of (input, expected) cases."""

import logging

import pytest

from turing_stepper import Machine, Rule
from turing_stepper.harness import (
    DEFAULT_STEP_LIMIT,
    CaseFailure,
    Definition,
    assert_cases,
    run_cases,
)

UNARY_INCREMENT = [
    Rule("add", "1", "1", "R", "add"),
    Rule("add", "_", "1", "R", "accept"),
]

# Accepts strings of a's of even length.
EVEN_AS = {
    "transitions": [
        {"state": "even", "read": "a", "move": "R", "nextState": "odd"},
        {"state": "odd", "read": "a", "move": "R", "nextState": "even"},
        {"state": "even", "read": "_", "nextState": "accept"},
    ],
    "initState": "even",
    "tape": "aaaa",
    "tests": [["", "accept"], ["aa", "accept"], ["aaa", "odd"], ["aaaaaa", "accept"]],
    "logState": "odd",
}


def test_expected_state_or_output():
    machine = Machine(UNARY_INCREMENT, "add")
    cases = [("1", "accept"), ("1", "11"), ("111", "1111")]
    assert run_cases(machine, cases, step_limit=1_000) == []


def test_failure_reports_input_and_observation(caplog):
    machine = Machine(UNARY_INCREMENT, "add")
    with caplog.at_level(logging.WARNING, logger="turing_stepper.harness"):
        failures = run_cases(machine, [("11", "11"), ("1", "11")], step_limit=1_000)

    assert failures == [CaseFailure("11", "11", "accept", "111")]
    assert str(failures[0]) == (
        "failed test: '11'. Expected '11', got state='accept', output='111'"
    )
    assert "failed test: '11'" in caplog.text


def test_step_limit_bounds_each_case():
    machine = Machine([Rule("loop", "_1", None, "R", "loop")], "loop")
    failures = run_cases(machine, [("1", "accept")], step_limit=50)

    assert len(failures) == 1
    assert failures[0].state == "loop"
    assert machine.step_count == 50


def test_assert_cases_lists_every_failure():
    machine = Machine(UNARY_INCREMENT, "add")
    with pytest.raises(AssertionError, match="2 case") as excinfo:
        assert_cases(machine, [("1", "1"), ("11", "accept"), ("", "x")], step_limit=100)
    assert "'1'" in str(excinfo.value)
    assert "''" in str(excinfo.value)


def test_definition_from_dict():
    definition = Definition.from_dict(EVEN_AS)

    assert definition.tape == "aaaa"
    assert definition.step_limit == DEFAULT_STEP_LIMIT
    assert definition.cases[2] == ("aaa", "odd")
    assert definition.machine.log_state == "odd"
    assert definition.verify() == []


def test_definition_prepare_leaves_replay_ready():
    definition = Definition.from_dict(dict(EVEN_AS, stepLimit=100))
    left_padding, size = definition.prepare()

    machine = definition.machine
    assert machine.step_count == 0
    assert machine.head == left_padding == 1
    assert machine.tape_length == size == 7
    assert machine.output() == "aaaa"


def test_definition_defaults():
    definition = Definition.from_dict(
        {"transitions": [], "initState": "q", "tests": None, "tape": None}
    )
    assert definition.tape == ""
    assert definition.cases == ()
    assert definition.verify() == []


def test_missing_tape_runs_empty_input():
    machine = Machine.from_dict(EVEN_AS)
    assert run_cases(machine, [(None, "accept")], step_limit=100) == []

    failures = run_cases(machine, [(None, "odd")], step_limit=100)
    assert failures == [CaseFailure("", "odd", "accept", "")]
