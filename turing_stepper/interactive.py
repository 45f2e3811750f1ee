"""Interactive playback support for Jupyter notebooks.

This module animates a machine in place: each tick calls `step()` (positive
delay) or `undo()` (negative delay) and redraws the tape, pausing longer while
the machine sits in its log state so that breakpoint states are easy to follow.
"""

from typing import Optional
import time

try:
    from IPython.display import display, Image as IPImage, clear_output
except ImportError as e:
    raise ImportError(
        "IPython is required for interactive playback. "
        "This module is intended for use in Jupyter notebooks."
    ) from e

from .frames import CELL_SIZE, render_tape, to_png


class LiveVisualizer:
    """Live-updating tape display for a Machine in notebooks.

    Example:
        >>> from turing_stepper import Machine, Rule
        >>> from turing_stepper.interactive import LiveVisualizer
        >>>
        >>> machine = Machine([Rule("add", "1", "1", "R", "add"),
        ...                    Rule("add", "_", "1", "R", "accept")], "add")
        >>> left_padding, size = machine.prepare_replay("111", 1_000)
        >>> viz = LiveVisualizer()
        >>> viz.play(machine, delay=0.1)   # forward until halted
        >>> viz.play(machine, delay=-0.1)  # rewind to the loaded input
    """

    def __init__(self, cell_size: int = CELL_SIZE):
        self.cell_size = cell_size
        self._frames_shown = 0

    @property
    def frames_shown(self) -> int:
        """Frames displayed by this visualizer across all plays."""
        return self._frames_shown

    def play(
        self,
        machine,
        delay: float = 0.1,
        log_delay: float = 0.5,
        max_frames: Optional[int] = None,
        show_stats: bool = True,
    ) -> int:
        """Animate the machine until it cannot move any further.

        Args:
            machine: Machine instance to animate
            delay: Seconds between ticks; a negative value plays backwards (undo)
            log_delay: Seconds between ticks while the machine is in its log state
            max_frames: Optional maximum number of ticks to play
            show_stats: Whether to print state and step count above the tape

        Returns:
            Number of ticks played
        """
        advance = machine.undo if delay < 0 else machine.step
        self._update_display(machine, show_stats)

        ticks = 0
        try:
            while max_frames is None or ticks < max_frames:
                in_log_state = machine.log_state is not None and machine.state == machine.log_state
                time.sleep(log_delay if in_log_state else abs(delay))
                if not advance():
                    break
                ticks += 1
                self._update_display(machine, show_stats)
        except KeyboardInterrupt:
            if show_stats:
                print(f"\n⏹ Stopped by user at step {machine.step_count:,}")
            return ticks

        if show_stats:
            if delay < 0 and machine.history_depth == 0:
                print(f"\n✓ Rewound to the loaded input after {ticks:,} ticks")
            elif machine.is_halted():
                status = "accepted" if machine.is_accepted() else "halted"
                print(f"\n✓ Machine {status} at step {machine.step_count:,}")
        return ticks

    def _update_display(self, machine, show_stats: bool) -> None:
        """Replace the previous frame with the current tape."""
        clear_output(wait=True)

        if show_stats:
            print(f"State: {machine.state} | Step {machine.step_count:,}")

        image = render_tape(machine.snapshot(), cell_size=self.cell_size, caption=False)
        display(IPImage(data=to_png(image), format="png"))
        self._frames_shown += 1


def visualize_live(
    machine,
    delay: float = 0.1,
    log_delay: float = 0.5,
    max_frames: Optional[int] = None,
    show_stats: bool = True,
) -> int:
    """Convenience wrapper around LiveVisualizer.play for quick use."""
    viz = LiveVisualizer()
    return viz.play(machine, delay, log_delay, max_frames, show_stats)
