"""Error types for codereel."""


class CodeReelError(Exception):
    """Base class for codereel errors."""


class LayoutError(CodeReelError):
    """A named layout could not be resolved."""


class UnknownPresetError(LayoutError):
    """Preset name is not one of the known layout presets."""


class UnknownSlotError(LayoutError):
    """Slot name does not exist in the requested preset."""


class UnknownThemeError(CodeReelError):
    """Theme name is not one of the bundled syntax themes."""


class DegenerateScaleError(CodeReelError):
    """Inverse coordinate mapping through a node with zero scale."""


class InvalidColorError(CodeReelError):
    """Color string is neither a hex color nor a color name Rich recognises."""
