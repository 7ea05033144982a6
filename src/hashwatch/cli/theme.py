"""
Rich theme for hashwatch.

One palette is shared by command output (via utils.console) and by the
console log sink, so a warning looks the same wherever it is printed.
"""

from rich.theme import Theme

PRIMARY = "#00A6FB"
SUCCESS = "#52C41A"    # initial digests, successful writes
WARNING = "#FAAD14"    # detected changes, retries
ERROR = "#FF4D4F"
INFO = "#1890FF"
MUTED = "#8C8C8C"      # timestamps, secondary text
ACCENT = "#722ED1"     # digests

_LEVELS = {
    "success": SUCCESS,
    "warning": WARNING,
    "error": ERROR,
    "info": INFO,
}

hashwatch_theme = Theme({
    "primary": PRIMARY,
    "muted": MUTED,
    "accent": ACCENT,
    **_LEVELS,
    # Bold variants used for one-line messages
    **{f"{name}.text": f"bold {color}" for name, color in _LEVELS.items()},

    "panel.title": f"bold {PRIMARY}",
    "panel.border": PRIMARY,
    "table.header": f"bold {PRIMARY}",
    "table.border": MUTED,
    "help.option": f"bold {ACCENT}",
    "help.example": MUTED,

    # History values
    "digest": ACCENT,
    "timestamp": MUTED,
    "path": f"bold {INFO}",
})

__all__ = ["hashwatch_theme", "PRIMARY", "SUCCESS", "WARNING", "ERROR", "INFO", "MUTED", "ACCENT"]
