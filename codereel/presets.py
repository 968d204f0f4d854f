"""Named slot layouts used to seed the initial position of blocks.

Slots are centred rectangles in canvas coordinates (origin at the canvas
centre, y pointing down). Presets are stateless: every call recomputes the
slots from the options.
"""

from dataclasses import dataclass, replace
from enum import Enum

from codereel.config import CANVAS_HEIGHT, CANVAS_WIDTH, FIT_GAP, SAFE_MARGIN_X, SAFE_MARGIN_Y
from codereel.errors import UnknownPresetError, UnknownSlotError

TITLE_MARGIN_X = 90
TITLE_MARGIN_Y = 80
TITLE_LEFT_BIAS = 70
CENTER_MAX_WIDTH = 900
CENTER_MAX_HEIGHT = 700


class LayoutPreset(str, Enum):
    """Known slot layouts."""

    TWO_COL = "2-col"
    TWO_LEFT_ONE_RIGHT = "2L-1R"
    TWO_LEFT_TWO_RIGHT = "2L-2R"
    SPLIT_VERTICAL = "split-vertical"
    CENTER = "center"
    CENTER_TITLE = "center-title"


@dataclass(frozen=True)
class Slot:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PresetOptions:
    """Canvas geometry for slot presets.

    Attributes:
        canvas_width: Full canvas width.
        canvas_height: Full canvas height.
        margin_x: Horizontal safe-zone margin.
        margin_y: Vertical safe-zone margin.
        gap: Gutter between slots.
        padding_x: Extra horizontal inset inside the safe zone.
        padding_y: Extra vertical inset inside the safe zone.

    """

    canvas_width: float = CANVAS_WIDTH
    canvas_height: float = CANVAS_HEIGHT
    margin_x: float = SAFE_MARGIN_X
    margin_y: float = SAFE_MARGIN_Y
    gap: float = FIT_GAP
    padding_x: float = 0.0
    padding_y: float = 0.0


def _resolve(preset: LayoutPreset | str) -> LayoutPreset:
    try:
        return LayoutPreset(preset)
    except ValueError:
        known = ", ".join(p.value for p in LayoutPreset)
        raise UnknownPresetError(f"Unknown preset: {preset!r} (known: {known})") from None


def get_slots(preset: LayoutPreset | str, options: PresetOptions | None = None) -> dict[str, Slot]:
    """Compute every slot of a preset.

    Raises:
        UnknownPresetError: If ``preset`` is not a known preset name.

    """
    preset = _resolve(preset)
    o = options or PresetOptions()

    left = -o.canvas_width / 2 + o.margin_x
    right = o.canvas_width / 2 - o.margin_x
    top = -o.canvas_height / 2 + o.margin_y
    bottom = o.canvas_height / 2 - o.margin_y
    safe_width = right - left - o.padding_x * 2
    safe_height = bottom - top - o.padding_y * 2

    col_width = (safe_width - o.gap) / 2
    left_x = left + o.padding_x + col_width / 2
    right_x = right - o.padding_x - col_width / 2
    card_height = (safe_height - o.gap) / 2
    top_y = top + o.padding_y + card_height / 2
    bottom_y = bottom - o.padding_y - card_height / 2

    if preset is LayoutPreset.TWO_COL:
        return {
            "L": Slot(left_x, 0, col_width, safe_height),
            "R": Slot(right_x, 0, col_width, safe_height),
        }
    if preset is LayoutPreset.TWO_LEFT_ONE_RIGHT:
        return {
            "L1": Slot(left_x, top_y, col_width, card_height),
            "L2": Slot(left_x, bottom_y, col_width, card_height),
            "R1": Slot(right_x, 0, col_width, safe_height),
        }
    if preset is LayoutPreset.TWO_LEFT_TWO_RIGHT:
        return {
            "L1": Slot(left_x, top_y, col_width, card_height),
            "L2": Slot(left_x, bottom_y, col_width, card_height),
            "R1": Slot(right_x, top_y, col_width, card_height),
            "R2": Slot(right_x, bottom_y, col_width, card_height),
        }
    if preset is LayoutPreset.SPLIT_VERTICAL:
        half = o.canvas_width / 2
        return {
            "L": Slot(-o.canvas_width / 4, 0, half, o.canvas_height),
            "R": Slot(o.canvas_width / 4, 0, half, o.canvas_height),
        }
    if preset is LayoutPreset.CENTER:
        return {
            "C": Slot(0, 0, min(CENTER_MAX_WIDTH, safe_width * 0.75), min(CENTER_MAX_HEIGHT, safe_height * 0.8)),
        }
    # CENTER_TITLE
    max_width = o.canvas_width - TITLE_MARGIN_X * 2
    max_height = o.canvas_height - TITLE_MARGIN_Y * 2
    x = -o.canvas_width / 2 + TITLE_MARGIN_X + max_width / 2 - TITLE_LEFT_BIAS
    return {"title": Slot(x, 0, max_width, max_height)}


def get_slot(preset: LayoutPreset | str, name: str, options: PresetOptions | None = None) -> Slot:
    """Look up one slot of a preset.

    Raises:
        UnknownPresetError: If ``preset`` is not a known preset name.
        UnknownSlotError: If the preset has no slot called ``name``.

    """
    slots = get_slots(preset, options)
    try:
        return slots[name]
    except KeyError:
        raise UnknownSlotError(
            f"Slot {name!r} not found in preset {_resolve(preset).value!r} (slots: {', '.join(slots)})"
        ) from None


def find_slot(preset: LayoutPreset | str, name: str, options: PresetOptions | None = None) -> Slot | None:
    """Like ``get_slot`` but returns None for a missing slot name."""
    return get_slots(preset, options).get(name)


def offset_slot(slot: Slot, dx: float, dy: float) -> Slot:
    return replace(slot, x=slot.x + dx, y=slot.y + dy)


def scale_slot(slot: Slot, scale_w: float, scale_h: float | None = None) -> Slot:
    return replace(slot, width=slot.width * scale_w, height=slot.height * (scale_w if scale_h is None else scale_h))
