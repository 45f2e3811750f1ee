"""Demo script stepping a machine forward and back in the console.

This mirrors what the notebook player does: a positive delay steps forward,
a negative delay undoes, and the log state is shown more slowly.
"""

import time

from turing_stepper import Machine, Rule

BINARY_INCREMENT = [
    Rule("right", "01", None, "R", "right"),
    Rule("right", "_", None, "L", "carry"),
    Rule("carry", "1", "0", "L", "carry"),
    Rule("carry", "0_", "1", None, "accept"),
]


def show(machine):
    print(f"{machine.step_count:>4}  {machine.state:<6}  {machine.tape}")


def play(machine, delay, log_delay):
    advance = machine.undo if delay < 0 else machine.step
    show(machine)
    while True:
        time.sleep(log_delay if machine.state == machine.log_state else abs(delay))
        if not advance():
            break
        show(machine)


def main():
    machine = Machine(BINARY_INCREMENT, "right", log_state="carry")
    left_padding, size = machine.prepare_replay("1011", 1_000)
    print(f"Pre-sized tape: left padding {left_padding}, {size} cells\n")

    try:
        print("Forward:")
        play(machine, delay=0.1, log_delay=0.3)
        print(f"\nOutput: {machine.output()} (accepted: {machine.is_accepted()})")

        print("\nBackward:")
        play(machine, delay=-0.05, log_delay=0.1)
    except KeyboardInterrupt:
        print(f"\n⏹ Interrupted at step {machine.step_count:,}")


if __name__ == "__main__":
    main()
