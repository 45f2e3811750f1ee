"""Frame rendering for tape snapshots.

This module draws a machine snapshot as a row of bordered tape cells with a
caption line (state and step count), and produces replay frames that all share
one size by pre-sizing the tape with a dry run before replaying.
"""

from functools import lru_cache
from io import BytesIO
from typing import Iterator, Optional

try:
    from PIL import Image, ImageDraw, ImageFont
    from matplotlib.font_manager import FontProperties, findfont
except ImportError as e:
    raise ImportError(
        "Pillow and matplotlib are required for frame rendering. "
        "Install with: pip install pillow matplotlib"
    ) from e

CELL_SIZE = 32  # Pixels per tape cell (square)

BACKGROUND_COLOR = (255, 255, 255)
BORDER_COLOR = (0, 0, 0)
TEXT_COLOR = (0, 0, 0)
CAPTION_COLOR = (110, 110, 110)
HEAD_COLOR = (144, 238, 144)  # lightgreen
HIGHLIGHT_COLOR = (255, 255, 0)  # yellow
HEAD_HIGHLIGHT_COLOR = (255, 215, 0)  # gold


@lru_cache(maxsize=None)
def load_font(font_size: int):
    """Monospace TrueType font at `font_size`, or Pillow's default font."""
    try:
        font_path = findfont(FontProperties(family="monospace"))
        return ImageFont.truetype(font_path, font_size)
    except OSError:
        return ImageFont.load_default()


def cell_color(is_head: bool, is_highlighted: bool) -> tuple[int, int, int]:
    if is_head and is_highlighted:
        return HEAD_HIGHLIGHT_COLOR
    if is_head:
        return HEAD_COLOR
    if is_highlighted:
        return HIGHLIGHT_COLOR
    return BACKGROUND_COLOR


def _draw_centered(draw, box, text, font, fill):
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = box[0] + (box[2] - box[0] - (right - left)) / 2 - left
    y = box[1] + (box[3] - box[1] - (bottom - top)) / 2 - top
    draw.text((x, y), text, font=font, fill=fill)


def render_tape(
    snapshot,
    cell_size: int = CELL_SIZE,
    font_size: Optional[int] = None,
    caption: bool = True,
) -> Image.Image:
    """Draw a machine snapshot as a strip of tape cells.

    The head cell is green. While the machine sits in its log state every
    non-blank cell is yellow (gold under the head). The image width depends only
    on the tape length, so frames of a pre-sized tape all match.

    Args:
        snapshot: Machine.snapshot() result (state, head, step_count, tape, blank, log_state)
        cell_size: Edge length of one cell in pixels
        font_size: Font size override (defaults to 60% of the cell)
        caption: Whether to draw the "State: ... Count: ..." line below the cells

    Returns:
        PIL Image in RGB mode
    """
    if font_size is None:
        font_size = max(1, int(cell_size * 0.6))
    font = load_font(font_size)

    width = len(snapshot.tape) * cell_size + 1
    height = cell_size * (2 if caption else 1) + 1
    image = Image.new("RGB", (width, height), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(image)

    logging_state = snapshot.log_state is not None and snapshot.state == snapshot.log_state
    for index, symbol in enumerate(snapshot.tape):
        box = (index * cell_size, 0, (index + 1) * cell_size, cell_size)
        fill = cell_color(
            index == snapshot.head,
            logging_state and symbol != snapshot.blank,
        )
        draw.rectangle(box, fill=fill, outline=BORDER_COLOR)
        _draw_centered(draw, box, str(symbol), font, TEXT_COLOR)

    if caption:
        text = f"State: {snapshot.state}  Count: {snapshot.step_count:,}"
        _draw_centered(draw, (0, cell_size, width, 2 * cell_size), text, font, CAPTION_COLOR)

    return image


def to_png(image: Image.Image) -> bytes:
    output = BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


def replay_frames(machine, content: str, step_limit: int, **render_options) -> Iterator[Image.Image]:
    """Yield one frame for the loaded input and one after every step.

    The machine is first dry-run on `content` (see Machine.prepare_replay) so
    the tape never grows during the replay and every frame has the same size.

    Example:
        >>> for index, frame in enumerate(replay_frames(machine, "11", 1_000)):
        ...     frame.save(f"frame_{index:04d}.png")
    """
    machine.prepare_replay(content, step_limit)
    yield render_tape(machine.snapshot(), **render_options)

    steps_taken = 0
    while steps_taken < step_limit and machine.step():
        steps_taken += 1
        yield render_tape(machine.snapshot(), **render_options)
