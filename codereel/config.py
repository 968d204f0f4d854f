"""Configuration constants for codereel.

Provide centralized configuration values used throughout the codereel package.
This module contains the text metric ratios, canvas geometry, and default
animation timings shared by the block, motion, and layout modules.

Exports:
    CHAR_WIDTH_RATIO: float - Monospace glyph width as a fraction of font size.
    LINE_HEIGHT_RATIO: float - Line height as a multiple of font size.
    DIM_OPACITY: float - Opacity applied to lines outside a highlight.
    CANVAS_WIDTH, CANVAS_HEIGHT: int - Logical canvas size in pixels.
    SAFE_MARGIN_X, SAFE_MARGIN_Y: int - Safe zone margins inside the canvas.
    DEFAULT_FPS: int - Frames per second used by the timeline scheduler.
    DEBUG_LOG_PATTERN: str - Filename pattern for --debug log files.
"""

# Text metrics (monospace approximation, not true glyph metrics)
CHAR_WIDTH_RATIO = 0.6
LINE_HEIGHT_RATIO = 1.5

# Block defaults
DEFAULT_FONT_SIZE = 20
DEFAULT_BLOCK_WIDTH = 600
DEFAULT_FONT_FAMILY = "JetBrains Mono, monospace"
PADDING_X_RATIO = 2.0
PADDING_Y_RATIO = 1.0
DIM_OPACITY = 0.25

# Canvas geometry, origin at the centre
CANVAS_WIDTH = 1920
CANVAS_HEIGHT = 1080
SAFE_MARGIN_X = 120
SAFE_MARGIN_Y = 60

# Auto-fit defaults
FIT_FILL_PERCENT = 0.88
FIT_CELL_FILL = 0.95
FIT_GAP = 60
FIT_MIN_FONT_SIZE = 20
FIT_MAX_FONT_SIZE = 36
FIT_FONT_STEP = 2

# Default animation timings, in seconds
APPEAR_DURATION = 0.6
MOVE_DURATION = 1.0
LINE_DURATION = 0.4
EXTRACT_DURATION = 0.5
MERGE_DURATION = 0.8
MORPH_DURATION = 0.6
MORPH_HEAD_START = 0.4
INJECT_DURATION = 0.8
INJECT_FADE_DURATION = 0.3
RESTORE_DURATION = 0.5
GHOST_FLY_DURATION = 0.8
GHOST_FADE_IN_DURATION = 0.12
GHOST_FADE_OUT_DURATION = 0.2

# Pause between choreography phases
PHASE_PAUSE = 0.2

# Scheduler
DEFAULT_FPS = 30

# Debug log file written by --debug
DEBUG_LOG_PATTERN = ".codereel-debug-{timestamp}.log"
