"""
settings.py
-----------
Centralized constants for the transition engine.
"""


# ===========================================================
# Timing
# ===========================================================

class Timing:
    """Scheduler and completion-detection timing."""
    FPS: int = 60
    FRAME_MS: float = 1000 / FPS

    # Grace period added to the declared duration before the timeout
    # fallback resolves a node whose transition-end signal never arrived.
    EPSILON_MS: float = 50.0


# ===========================================================
# Node Defaults
# ===========================================================

class NodeDefaults:
    """Default values for per-node transition options."""
    APPEAR: bool = False
    UNMOUNT: bool = True
    ID_PREFIX: str = "node"


# ===========================================================
# Rendering
# ===========================================================

class Render:
    """Host element rendering defaults."""
    LAYER: int = 100
    ANIMATED_PROPERTIES = ("alpha", "offset_x", "offset_y", "scale")
    PROPERTY_DEFAULTS = {
        "alpha": 255.0,
        "offset_x": 0.0,
        "offset_y": 0.0,
        "scale": 1.0,
    }
