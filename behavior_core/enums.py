"""
Enumerations shared by the detection and scoring layers.
"""

from enum import Enum


class Handedness(str, Enum):
    """Handedness label reported by the hand model."""
    LEFT = "Left"
    RIGHT = "Right"


class FacialExpression(str, Enum):
    """Coarse expression label derived from mouth geometry."""
    NEUTRAL = "neutral"
    HAPPY = "happy"
    SURPRISED = "surprised"


class ModelState(str, Enum):
    """Load state of the perception model set."""
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"  # Terminal: the process must be restarted to retry


class LoopState(str, Enum):
    """Operational state of the detection loop."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
