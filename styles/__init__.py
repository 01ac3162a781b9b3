"""Shared style constants for FOLDPLAY.

Bars fill from ACCENT through PRIMARY to HIGHLIGHT; track markers in the
library tree use the LIKED and SKIPPED colors.
"""

COLORS = {
    "accent": "#cc5500",
    "primary": "#ff8c00",
    "highlight": "#ffb347",
    "liked": "#ff6f61",
    "skipped": "#555555",
    "muted": "#888888",
    "inactive": "#333333",
}

COLOR_ACCENT = COLORS["accent"]
COLOR_PRIMARY = COLORS["primary"]
COLOR_HIGHLIGHT = COLORS["highlight"]
COLOR_LIKED = COLORS["liked"]
COLOR_SKIPPED = COLORS["skipped"]
COLOR_MUTED = COLORS["muted"]
COLOR_INACTIVE = COLORS["inactive"]
