"""Turing Stepper - reversible single-tape Turing machine simulator.

This package provides a pure Python engine for teaching-sized Turing machines
that can be stepped forward, undone step by step, and replayed frame by frame.

Pure Python core:
    - Rule: authoring record (state, read symbols, write, move, next state)
    - Action: resolved transition for one (state, symbol) pair
    - Program: transition table built from rules, with its markdown rendering
    - Tape: growable tape with a one-cell lookahead and left-growth counter
    - Machine: step / undo / run engine with an exact undo history

Collaborators:
    - harness: batch verification of (input, expected) cases
    - frames: Pillow rendering of tape snapshots and replay frames
    - interactive: IPython live player (forward or backward by delay polarity)

Example:
    >>> machine = Machine(
    ...     [
    ...         Rule("add", "1", "1", "R", "add"),
    ...         Rule("add", "_", "1", "R", "accept"),
    ...     ],
    ...     "add",
    ... )
    >>> machine.load("11")
    >>> machine.run(1_000)
    3
    >>> machine.state, machine.output(), machine.is_accepted()
    ('accept', '111', True)
"""

from collections import Counter
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional, Sequence, Union

# Frame utilities (require Pillow and matplotlib)
try:
    from .frames import CELL_SIZE, render_tape, replay_frames, to_png
except ImportError:
    CELL_SIZE = None
    render_tape = None
    replay_frames = None
    to_png = None

# Interactive utilities (notebook support)
try:
    from .interactive import LiveVisualizer, visualize_live
except ImportError:
    LiveVisualizer = None
    visualize_live = None

BLANK = "_"
ACCEPT = "accept"

LEFT, STAY, RIGHT = -1, 0, 1

_DIRECTIONS = {"L": LEFT, "R": RIGHT, "S": STAY, " ": STAY, "": STAY, None: STAY}
_MOVE_WORDS = {LEFT: "left", STAY: "stay", RIGHT: "right"}


def direction_of(move) -> int:
    """Translate a rule's move spelling ("L", "R" or stay) into a head delta."""
    try:
        return _DIRECTIONS[move]
    except (KeyError, TypeError):
        raise ValueError(
            f"Invalid move {move!r}. Expected 'L', 'R', 'S' or None for stay."
        ) from None


@dataclass(frozen=True)
class Rule:
    """One authoring record: in `state`, reading any symbol of `read`, write
    `write` (None keeps the cell), move the head and switch to `next_state`.

    A string `read` is taken character by character.
    """

    state: str
    read: Union[str, Sequence[str]]
    write: Optional[str]
    move: Optional[str]
    next_state: str

    @classmethod
    def from_dict(cls, mapping):
        """Build a rule from ``{state, read, write?, move?, nextState}``."""
        next_state = mapping.get("nextState", mapping.get("next_state"))
        if "state" not in mapping or "read" not in mapping or next_state is None:
            raise ValueError(
                f"Transition needs 'state', 'read' and 'nextState': {mapping!r}"
            )
        read = mapping["read"]
        if not isinstance(read, str):
            read = tuple(read)
        return cls(
            mapping["state"], read, mapping.get("write"), mapping.get("move"), next_state
        )


class Action:
    """Resolved transition for a single (state, symbol) key."""

    __slots__ = ("rule", "symbol", "next_symbol", "direction", "next_state")

    def __init__(self, rule, symbol, next_symbol, direction, next_state):
        self.rule = rule
        self.symbol = symbol
        self.next_symbol = next_symbol
        self.direction = direction
        self.next_state = next_state

    def __repr__(self):
        return (
            f"Action({self.rule.state!r}, {self.symbol!r} -> "
            f"{self.next_symbol!r}, {self.direction:+d}, {self.next_state!r})"
        )


def _join_symbols(symbols) -> str:
    symbols = list(symbols)
    if len(symbols) < 2:
        return "".join(symbols)
    return ", ".join(symbols[:-1]) + " or " + symbols[-1]


def _escape(cell) -> str:
    return str(cell).replace("|", "\\|")


def _markdown_row(cells, widths) -> str:
    return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"


class Program:
    def __init__(self, rules, actions):
        self.rules = tuple(rules)
        self.actions = actions  # (state, symbol) -> Action

    def __len__(self):
        return len(self.actions)

    @property
    def states(self) -> list[str]:
        return list(dict.fromkeys(rule.state for rule in self.rules))

    def action(self, state, symbol) -> Optional[Action]:
        return self.actions.get((state, symbol))

    @classmethod
    def from_rules(cls, rules, strict=False):
        """Expand rules into one action per (state, symbol) key.

        A later rule on the same key silently replaces the earlier one. With
        ``strict=True`` duplicate keys, empty read sets and next states that no
        rule defines (other than "accept") raise ValueError instead.
        """
        rules = tuple(rules)
        actions = {}
        for rule in rules:
            direction = direction_of(rule.move)
            if strict and not rule.read:
                raise ValueError(f"Rule for state {rule.state!r} reads no symbols")
            for symbol in rule.read:
                key = (rule.state, symbol)
                if strict and key in actions:
                    raise ValueError(
                        f"Duplicate transition for state {rule.state!r} reading {symbol!r}"
                    )
                actions[key] = Action(rule, symbol, rule.write, direction, rule.next_state)

        if strict:
            known_states = {rule.state for rule in rules} | {ACCEPT}
            for rule in rules:
                if rule.next_state not in known_states:
                    raise ValueError(
                        f"Rule for state {rule.state!r} moves to undefined state "
                        f"{rule.next_state!r}"
                    )

        return cls(rules, actions)

    def markdown(self) -> str:
        """Render the original rules as a column-aligned markdown table."""
        header = ("State", "Read", "Write", "Move", "Next state")
        rows = [
            (
                _escape(rule.state),
                _join_symbols(_escape(symbol) for symbol in rule.read),
                "" if rule.write is None else _escape(rule.write),
                _MOVE_WORDS[direction_of(rule.move)],
                _escape(rule.next_state),
            )
            for rule in self.rules
        ]
        widths = [
            max(len(row[column]) for row in [header, *rows])
            for column in range(len(header))
        ]
        lines = [
            _markdown_row(header, widths),
            _markdown_row(["-" * width for width in widths], widths),
        ]
        lines.extend(_markdown_row(row, widths) for row in rows)
        return "\n".join(lines)

    def unused(self, counts) -> list[Rule]:
        """Rules narrowed to the read symbols whose action was never used.

        `counts` maps actions to usage counts. A key overwritten by a later rule
        is reported only under the rule that owns it.
        """
        unused = []
        seen = set()
        for rule in self.rules:
            symbols = []
            for symbol in rule.read:
                key = (rule.state, symbol)
                action = self.actions[key]
                if key in seen or action.rule is not rule:
                    continue
                seen.add(key)
                if not counts[action]:
                    symbols.append(symbol)
            if symbols:
                read = "".join(symbols) if isinstance(rule.read, str) else tuple(symbols)
                unused.append(replace(rule, read=read))
        return unused


class Tape:
    def __init__(self, blank=BLANK):
        self.blank = blank
        self.left_padding = 1
        self.left_growth_count = 0  # Left edge crossings since load
        self.cells = [blank, blank]
        self.head = 1

    def load(self, content="", left_padding=1, min_size=2):
        """Reset to `left_padding` blanks followed by `content`, padded to `min_size`.

        Example:
            >>> tape = Tape()
            >>> tape.load("10_1", left_padding=2, min_size=8)
            >>> list(tape)
            ['_', '_', '1', '0', '_', '1', '_', '_']
            >>> tape.output()
            '10_1'
        """
        if left_padding < 0:
            raise ValueError(f"left_padding must be non-negative, got {left_padding}")
        if min_size < 0:
            raise ValueError(f"min_size must be non-negative, got {min_size}")

        cells = [self.blank] * left_padding + (list(content) or [self.blank])
        # The cell after the head must exist from the start.
        size = max(min_size, left_padding + 2)
        cells.extend([self.blank] * (size - len(cells)))

        self.cells = cells
        self.head = left_padding
        self.left_padding = left_padding
        self.left_growth_count = 0

    @property
    def origin(self) -> int:
        """Index of the first loaded content cell."""
        return self.left_padding + self.left_growth_count

    def __len__(self):
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def __getitem__(self, position):
        if 0 <= position < len(self.cells):
            return self.cells[position]
        return self.blank

    def __setitem__(self, position, symbol):
        self.cells[position] = symbol

    def move_head(self, delta, grow_left=True):
        """Move the head, keeping the lookahead cell allocated.

        With `grow_left` the head is kept at index 1 or more by prepending
        blanks. Undo passes False: it only revisits cells a forward step left.
        """
        self.head += delta
        while self.head + 1 >= len(self.cells):
            self.cells.append(self.blank)
        while grow_left and self.head <= 0:
            self.cells.insert(0, self.blank)
            self.head += 1
            self.left_growth_count += 1

    def output(self) -> str:
        """Tape contents without the leading and trailing runs of blanks."""
        cells = self.cells
        start, stop = 0, len(cells)
        while start < stop and cells[start] == self.blank:
            start += 1
        while stop > start and cells[stop - 1] == self.blank:
            stop -= 1
        return "".join(cells[start:stop])

    def __str__(self):
        return "".join(
            f"[{symbol}]" if index == self.head else symbol
            for index, symbol in enumerate(self.cells)
        )


class HistoryEntry:
    """What one step overwrote, recorded before the step mutates anything."""

    __slots__ = ("action", "pre_state", "inverse_delta", "pre_write_symbol")

    def __init__(self, action, pre_state, inverse_delta, pre_write_symbol):
        self.action = action
        self.pre_state = pre_state
        self.inverse_delta = inverse_delta
        self.pre_write_symbol = pre_write_symbol


class Snapshot(NamedTuple):
    state: str
    head: int
    step_count: int
    tape: tuple
    blank: str
    log_state: Optional[str]


class Machine:
    """Deterministic single-tape machine with step, undo and bounded run.

    `program` is a Program or a list of Rule. Usage counts survive `load()` so
    coverage can be audited across several inputs; `reset_usage()` clears them.
    """

    def __init__(self, program, initial_state, blank=BLANK, log_state=None, strict=False):
        if not isinstance(program, Program):
            program = Program.from_rules(program, strict=strict)
        self.program = program
        self.initial_state = initial_state
        self.log_state = log_state
        self.tape = Tape(blank)
        self.usage = Counter()
        self.load()

    @classmethod
    def from_dict(cls, definition, strict=False):
        """Build a machine from ``{transitions, initState, blank?, logState?}``."""
        if "transitions" not in definition:
            raise ValueError("Machine definition needs a 'transitions' list")
        initial_state = definition.get("initState", definition.get("initial_state"))
        if initial_state is None:
            raise ValueError("Machine definition needs an 'initState'")
        return cls(
            [Rule.from_dict(transition) for transition in definition["transitions"]],
            initial_state,
            blank=definition.get("blank", BLANK),
            log_state=definition.get("logState", definition.get("log_state")),
            strict=strict,
        )

    def load(self, content="", left_padding=1, min_size=2):
        self.tape.load(content, left_padding, min_size)
        self.state = self.initial_state
        self.step_count = 0
        self.history = []

    def step(self) -> bool:
        tape = self.tape
        symbol = tape[tape.head]
        action = self.program.action(self.state, symbol)
        if action is None:
            return False

        self.history.append(HistoryEntry(action, self.state, -action.direction, symbol))
        if action.next_symbol:
            tape[tape.head] = action.next_symbol
        self.state = action.next_state
        tape.move_head(action.direction)
        self.usage[action] += 1
        self.step_count += 1
        return True

    def undo(self) -> bool:
        if not self.history:
            return False

        entry = self.history.pop()
        tape = self.tape
        self.state = entry.pre_state
        tape.move_head(entry.inverse_delta, grow_left=False)
        tape[tape.head] = entry.pre_write_symbol
        self.usage[entry.action] -= 1
        self.step_count -= 1
        return True

    def run(self, step_limit) -> int:
        """Step until the machine halts or `step_limit` steps have run.

        Returns the number of steps taken. Reaching the limit looks the same as
        halting from here; ask `is_halted()` to tell them apart.
        """
        if step_limit <= 0:
            raise ValueError("step_limit must be at least 1")

        steps_taken = 0
        while steps_taken < step_limit and self.step():
            steps_taken += 1
        return steps_taken

    def __iter__(self):
        return self

    def __next__(self):
        previous_index = self.tape.head
        if not self.step():
            raise StopIteration
        return previous_index

    def prepare_replay(self, content, step_limit) -> tuple[int, int]:
        """Dry-run `content`, then reload it pre-sized so replay never grows the tape.

        Returns the (left_padding, min_size) used for the reload. Usage counts
        are left as they were before the dry run.
        """
        usage = self.usage.copy()
        self.load(content)
        self.run(step_limit)
        left_padding, size = self.left_padding_required, self.tape_length
        self.usage = usage
        self.load(content, left_padding, size)
        return left_padding, size

    def is_halted(self) -> bool:
        return self.program.action(self.state, self.tape[self.tape.head]) is None

    def is_accepted(self) -> bool:
        return self.state == ACCEPT

    def output(self) -> str:
        return self.tape.output()

    @property
    def head(self) -> int:
        return self.tape.head

    @property
    def blank(self) -> str:
        return self.tape.blank

    @property
    def tape_contents(self) -> tuple:
        return tuple(self.tape)

    @property
    def tape_length(self) -> int:
        return len(self.tape)

    @property
    def left_growth_count(self) -> int:
        return self.tape.left_growth_count

    @property
    def left_padding_required(self) -> int:
        """Left padding that lets a reload of the same input run without left growth."""
        return self.tape.origin

    @property
    def history_depth(self) -> int:
        return len(self.history)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            self.state,
            self.tape.head,
            self.step_count,
            tuple(self.tape),
            self.tape.blank,
            self.log_state,
        )

    def usage_count(self, state, symbol) -> int:
        action = self.program.action(state, symbol)
        return 0 if action is None else self.usage[action]

    def reset_usage(self):
        """Zero the usage counts and make the current position the undo baseline."""
        self.usage.clear()
        self.history = []
        self.step_count = 0

    def unused_transitions(self) -> list[Rule]:
        return self.program.unused(self.usage)

    def markdown_table(self) -> str:
        return self.program.markdown()


__all__ = [
    # Pure Python core
    "BLANK",
    "ACCEPT",
    "LEFT",
    "STAY",
    "RIGHT",
    "direction_of",
    "Rule",
    "Action",
    "Program",
    "Tape",
    "HistoryEntry",
    "Snapshot",
    "Machine",
    # Frame utilities (if Pillow and matplotlib available)
    "CELL_SIZE",
    "render_tape",
    "replay_frames",
    "to_png",
    # Interactive utilities (if IPython available)
    "LiveVisualizer",
    "visualize_live",
]
