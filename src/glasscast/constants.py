"""
Engine constants and default configuration for glasscast.

All scene data (walls and light) is in pixel space: (0, 0) is the top-left
corner of the canvas and y grows downward.
"""

# March
DEFAULT_STEP_SIZE = 1.0        # canvas units between samples
DEFAULT_PROBE_WIDTH = 1.0      # probe extent per axis / distance threshold
CONTAINMENT_TOLERANCE = 1e-4   # float32 slack when clipping line hits to segments

# Sweep (integer degrees, stop is exclusive)
DEFAULT_ANGLE_START = 0
DEFAULT_ANGLE_STOP = 360
DEFAULT_ANGLE_STEP = 1

# Canvas
DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600
BACKGROUND_COLOR = (0, 0, 0, 255)

# Colors
CHANNEL_MIN = 0
CHANNEL_MAX = 255
OPAQUE = 255
