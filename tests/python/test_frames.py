"""Tests for Pillow tape rendering and replay frames."""

import pytest

pytest.importorskip("PIL")
pytest.importorskip("matplotlib")

from turing_stepper import Machine, Rule  # noqa: E402
from turing_stepper.frames import (  # noqa: E402
    BACKGROUND_COLOR,
    CELL_SIZE,
    HEAD_COLOR,
    HEAD_HIGHLIGHT_COLOR,
    HIGHLIGHT_COLOR,
    cell_color,
    render_tape,
    replay_frames,
    to_png,
)

BINARY_INCREMENT = [
    Rule("right", "01", None, "R", "right"),
    Rule("right", "_", None, "L", "carry"),
    Rule("carry", "1", "0", "L", "carry"),
    Rule("carry", "0_", "1", None, "accept"),
]


def corner_pixel(image, index, cell_size=CELL_SIZE):
    """Pixel just inside the top-left corner of tape cell `index`."""
    return image.getpixel((index * cell_size + 3, 3))


class TestCellColor:
    def test_palette(self):
        assert cell_color(False, False) == BACKGROUND_COLOR
        assert cell_color(True, False) == HEAD_COLOR
        assert cell_color(False, True) == HIGHLIGHT_COLOR
        assert cell_color(True, True) == HEAD_HIGHLIGHT_COLOR


class TestRenderTape:
    def test_size_follows_tape_length(self):
        machine = Machine(BINARY_INCREMENT, "right")
        machine.load("101")
        image = render_tape(machine.snapshot())
        assert image.size == (4 * CELL_SIZE + 1, 2 * CELL_SIZE + 1)
        assert image.mode == "RGB"

    def test_without_caption(self):
        machine = Machine(BINARY_INCREMENT, "right")
        machine.load("1")
        image = render_tape(machine.snapshot(), cell_size=20, caption=False)
        assert image.size == (3 * 20 + 1, 20 + 1)

    def test_head_cell_is_green(self):
        machine = Machine(BINARY_INCREMENT, "right")
        machine.load("101")
        machine.step()
        image = render_tape(machine.snapshot())
        assert corner_pixel(image, machine.head) == HEAD_COLOR
        assert corner_pixel(image, 1) == BACKGROUND_COLOR

    def test_log_state_highlights_non_blank_cells(self):
        machine = Machine(BINARY_INCREMENT, "right", log_state="right")
        machine.load("10")
        image = render_tape(machine.snapshot())
        assert corner_pixel(image, 0) == BACKGROUND_COLOR  # blank
        assert corner_pixel(image, 1) == HEAD_HIGHLIGHT_COLOR  # head on "1"
        assert corner_pixel(image, 2) == HIGHLIGHT_COLOR  # "0"

    def test_other_states_not_highlighted(self):
        machine = Machine(BINARY_INCREMENT, "right", log_state="carry")
        machine.load("10")
        image = render_tape(machine.snapshot())
        assert corner_pixel(image, 2) == BACKGROUND_COLOR


def test_to_png():
    machine = Machine(BINARY_INCREMENT, "right")
    machine.load("1")
    png_bytes = to_png(render_tape(machine.snapshot()))
    assert isinstance(png_bytes, bytes)
    assert png_bytes.startswith(b"\x89PNG")


class TestReplayFrames:
    def test_one_frame_per_step_all_same_size(self):
        machine = Machine(BINARY_INCREMENT, "right")
        frames = list(replay_frames(machine, "111", 1_000, cell_size=10))

        assert len(frames) == machine.step_count + 1 == 9
        assert len({frame.size for frame in frames}) == 1
        assert machine.output() == "1000"
        assert machine.left_growth_count == 0

    def test_step_limit(self):
        machine = Machine([Rule("loop", "_1", None, "R", "loop")], "loop")
        frames = list(replay_frames(machine, "1", 5, cell_size=8))
        assert len(frames) == 6
        assert machine.step_count == 5
