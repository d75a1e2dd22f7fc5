"""
Logo placement calculator.

Maps a canvas size, an overlay size, a named anchor and padding values to
the top-left coordinate at which the overlay is drawn.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Anchor(Enum):
    TOP_LEFT = 'top-left'
    TOP_CENTER = 'top-center'
    TOP_RIGHT = 'top-right'
    CENTER_LEFT = 'center-left'
    CENTER = 'center'
    CENTER_RIGHT = 'center-right'
    BOTTOM_LEFT = 'bottom-left'
    BOTTOM_CENTER = 'bottom-center'
    BOTTOM_RIGHT = 'bottom-right'
    NONE = 'none'


# (vertical, horizontal) -> anchor; edges are 'start', 'center' or 'end'
_ANCHORS_BY_EDGES = {
    ('start', 'start'): Anchor.TOP_LEFT,
    ('start', 'center'): Anchor.TOP_CENTER,
    ('start', 'end'): Anchor.TOP_RIGHT,
    ('center', 'start'): Anchor.CENTER_LEFT,
    ('center', 'center'): Anchor.CENTER,
    ('center', 'end'): Anchor.CENTER_RIGHT,
    ('end', 'start'): Anchor.BOTTOM_LEFT,
    ('end', 'center'): Anchor.BOTTOM_CENTER,
    ('end', 'end'): Anchor.BOTTOM_RIGHT,
}
_EDGES_BY_ANCHOR = {anchor: edges for edges, anchor in _ANCHORS_BY_EDGES.items()}


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Placement:
    x: float
    y: float


@dataclass(frozen=True)
class PlacementDefaults:
    """Fallback values used when a request leaves something out."""

    anchor: Anchor = Anchor.BOTTOM_RIGHT
    padding: float = 40
    logo_size: float = 10  # percent of the canvas width


@dataclass(frozen=True)
class PlacementRequest:
    anchor: Anchor
    padding_x: float
    padding_y: float


def _vertical_edge(position: str) -> Optional[str]:
    if 'top' in position:
        return 'start'
    if 'bottom' in position:
        return 'end'
    if 'center' in position or 'middle' in position:
        return 'center'
    return None


def _horizontal_edge(position: str) -> Optional[str]:
    if 'left' in position:
        return 'start'
    if 'right' in position:
        return 'end'
    if 'center' in position or 'middle' in position:
        return 'center'
    return None


def parse_anchor(position: Any, default: Anchor = Anchor.BOTTOM_RIGHT) -> Anchor:
    """
    Resolve a free-form position string to an anchor.

    The string is lowercased and stripped of whitespace. Vertical and
    horizontal keywords are matched independently, so 'Top Right',
    'top-right' and 'right_top' all resolve to the same anchor. When only
    one axis is named the other one is centered.

    Args:
        position: Caller-supplied position, usually a string
        default: Anchor returned when nothing recognizable is found

    Returns:
        The resolved anchor. Never raises.
    """
    if not isinstance(position, str):
        return default

    normalized = ''.join(position.lower().split())
    if normalized == 'none':
        return Anchor.NONE

    vertical = _vertical_edge(normalized)
    horizontal = _horizontal_edge(normalized)
    if vertical is None and horizontal is None:
        return default

    return _ANCHORS_BY_EDGES[(vertical or 'center', horizontal or 'center')]


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a meaningful size
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    # 'nan' and 'inf' parse as floats but can't be drawn
    return number if math.isfinite(number) else None


def derive_overlay_size(canvas: Size, logo: Size, logo_size: Any, default_logo_size: float = 10) -> Size:
    """
    Scale the logo to a percentage of the canvas width, keeping its aspect ratio.

    Args:
        canvas: Base image size
        logo: Native logo size
        logo_size: Requested logo width as a percent of the canvas width
        default_logo_size: Percent used when logo_size is missing or not positive

    Returns:
        The overlay size in (fractional) pixels
    """
    percent = _as_number(logo_size)
    if percent is None or percent <= 0:
        percent = default_logo_size

    width = canvas.width * (percent / 100)
    height = (logo.height / logo.width) * width if logo.width else 0
    return Size(width=width, height=height)


def build_placement_request(payload: Dict[str, Any], defaults: PlacementDefaults = PlacementDefaults()) -> PlacementRequest:
    """
    Build a placement request from a JSON payload.

    'padding' applies to both axes; 'paddingX' and 'paddingY' override it.
    Missing or non-numeric values fall back to the defaults.
    """
    padding = _as_number(payload.get('padding'))
    if padding is None:
        padding = defaults.padding

    padding_x = _as_number(payload.get('paddingX'))
    padding_y = _as_number(payload.get('paddingY'))

    return PlacementRequest(
        anchor=parse_anchor(payload.get('position'), defaults.anchor),
        padding_x=padding if padding_x is None else padding_x,
        padding_y=padding if padding_y is None else padding_y,
    )


def _axis_coordinate(edge: str, canvas_extent: float, overlay_extent: float, padding: float) -> float:
    if edge == 'start':
        return padding
    if edge == 'end':
        return canvas_extent - overlay_extent - padding
    return (canvas_extent - overlay_extent) / 2


def calculate_placement(canvas: Size, overlay: Size, request: PlacementRequest) -> Optional[Placement]:
    """
    Compute the top-left draw coordinate of the overlay.

    Padding is measured inward from the anchored edge and ignored on a
    centered axis. Results are not clamped: zero or negative padding may put
    the overlay partly or fully outside the canvas.

    Args:
        canvas: Base image size
        overlay: Overlay size as it will be drawn
        request: Anchor and per-axis padding

    Returns:
        The draw coordinate, or None when the anchor is Anchor.NONE
    """
    if request.anchor is Anchor.NONE:
        return None

    vertical, horizontal = _EDGES_BY_ANCHOR[request.anchor]
    return Placement(
        x=_axis_coordinate(horizontal, canvas.width, overlay.width, request.padding_x),
        y=_axis_coordinate(vertical, canvas.height, overlay.height, request.padding_y),
    )
