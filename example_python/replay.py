"""Render replay frames of a Turing machine run to PNG files.

Example usage:
    python example_python/replay.py
"""

import time
from pathlib import Path

from turing_stepper import Machine
from turing_stepper.frames import replay_frames
from turing_stepper.harness import Definition

UNARY_ADDITION = {
    "transitions": [
        {"state": "start", "read": "1", "write": "_", "move": "R", "nextState": "seek"},
        {"state": "seek", "read": "1", "move": "R", "nextState": "seek"},
        {"state": "seek", "read": "+", "write": "1", "move": "R", "nextState": "trim"},
        {"state": "trim", "read": "1", "move": "R", "nextState": "trim"},
        {"state": "trim", "read": "_", "nextState": "accept"},
    ],
    "initState": "start",
    "tape": "11+111",
    "tests": [["1+1", "11"], ["11+111", "11111"], ["111+", "111"]],
    "logState": "seek",
}


def main():
    """Check the definition's cases, print its rule table and save replay frames."""
    start_time = time.time()

    definition = Definition.from_dict(UNARY_ADDITION)
    machine: Machine = definition.machine

    failures = definition.verify()
    print(f"{len(definition.cases) - len(failures)}/{len(definition.cases)} cases passed")
    for failure in failures:
        print(f"  {failure}")

    print()
    print(machine.markdown_table())

    output_dir = Path("output") / "replay"
    output_dir.mkdir(parents=True, exist_ok=True)

    for index, frame in enumerate(replay_frames(machine, definition.tape, definition.step_limit)):
        frame.save(output_dir / f"frame_{index:04d}.png")

    print(f"\nSaved {machine.step_count + 1} frames to {output_dir.absolute()}")
    print(f"Final state: {machine.state}, output: {machine.output()}")

    unused = machine.unused_transitions()
    if unused:
        print("Unused transitions:")
        for rule in unused:
            print(f"  {rule}")

    print(f"Done in {time.time() - start_time:.2f}s")


if __name__ == "__main__":
    main()
