"""Theme colors and color utilities for the UI."""


class Palette:
    """Dark arcade palette shared by all screens."""

    BG_TOP = "#101a2b"
    BG_BOTTOM = "#1d3557"

    PRIMARY = "#00b4d8"
    PRIMARY_LIGHT = "#48cae4"
    PRIMARY_DARK = "#0077b6"

    GOLD = "#ffd166"
    DANGER = "#ef476f"
    SUCCESS = "#06d6a0"

    PANEL_BG = "rgba(255, 255, 255, 0.08)"
    PANEL_BORDER = "rgba(255, 255, 255, 0.18)"

    TEXT_PRIMARY = "#f1faee"
    TEXT_MUTED = "#a8b2c1"

    # Toasts fade from this color into the background as they expire.
    TOAST_BG = "#264653"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b. Malformed input returns *a*."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        start = [int(a[i:i + 2], 16) for i in (1, 3, 5)]
        end = [int(b[i:i + 2], 16) for i in (1, 3, 5)]
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    mixed = [int(s + (e - s) * t) for s, e in zip(start, end)]
    return "#" + "".join(f"{channel:02X}" for channel in mixed)
