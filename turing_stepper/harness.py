"""Batch verification of a machine against (input tape, expected) cases.

A case passes when the expected value equals either the final state or the
trimmed output after a bounded run:

    >>> from turing_stepper import Machine, Rule
    >>> machine = Machine(
    ...     [Rule("add", "1", "1", "R", "add"), Rule("add", "_", "1", "R", "accept")],
    ...     "add",
    ... )
    >>> run_cases(machine, [("11", "111"), ("", "accept")], step_limit=1_000)
    []
"""

import logging
from typing import NamedTuple, Optional

from . import Machine

logger = logging.getLogger(__name__)

DEFAULT_STEP_LIMIT = 1_000_000


class CaseFailure(NamedTuple):
    tape: str
    expected: str
    state: str
    output: str

    def __str__(self):
        return (
            f"failed test: {self.tape!r}. Expected {self.expected!r}, "
            f"got state={self.state!r}, output={self.output!r}"
        )


def run_case(machine, tape, expected, step_limit) -> Optional[CaseFailure]:
    """Run one case; a missing tape (``None``) runs on the empty input."""
    tape = tape or ""
    machine.load(tape)
    machine.run(step_limit)
    state, output = machine.state, machine.output()
    if expected in (state, output):
        return None
    return CaseFailure(tape, expected, state, output)


def run_cases(machine, cases, step_limit) -> list[CaseFailure]:
    """Run every case and return the failures, logging each one."""
    failures = []
    for tape, expected in cases:
        failure = run_case(machine, tape, expected, step_limit)
        if failure is not None:
            logger.warning("%s", failure)
            failures.append(failure)
    return failures


def assert_cases(machine, cases, step_limit) -> None:
    failures = run_cases(machine, cases, step_limit)
    if failures:
        raise AssertionError(
            f"{len(failures)} case(s) failed:\n" + "\n".join(map(str, failures))
        )


class Definition(NamedTuple):
    """A machine together with its default input, test cases and step limit."""

    machine: Machine
    tape: str
    cases: tuple
    step_limit: int

    @classmethod
    def from_dict(cls, mapping, strict=False):
        """Read ``{transitions, initState, tape?, tests?, logState?, stepLimit?}``."""
        cases = tuple((tape, expected) for tape, expected in mapping.get("tests") or ())
        step_limit = mapping.get("stepLimit", mapping.get("step_limit", DEFAULT_STEP_LIMIT))
        return cls(
            Machine.from_dict(mapping, strict=strict),
            mapping.get("tape") or "",
            cases,
            step_limit,
        )

    def verify(self) -> list[CaseFailure]:
        return run_cases(self.machine, self.cases, self.step_limit)

    def prepare(self) -> tuple[int, int]:
        """Verify the cases, then leave the machine pre-sized on the default input."""
        self.verify()
        return self.machine.prepare_replay(self.tape, self.step_limit)
