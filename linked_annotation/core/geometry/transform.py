"""
Coordinate transforms between the screen, the canvas backing store and the
content (image) space.

The paint transform is ``translate(pan) -> scale(s)``. Hit-testing undoes it
in reverse order: screen -> canvas pixels through the CSS-to-canvas ratio,
then subtract the pan, then divide by the scale. Any other order drifts
away from the painted pixels as soon as the view is zoomed and panned.
"""

from dataclasses import dataclass, replace
from typing import NamedTuple, Tuple


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class ViewTransform:
    """Pan offset (canvas pixels) and zoom factor of the view."""

    pan_x: float = 0.0
    pan_y: float = 0.0
    scale: float = 1.0

    @property
    def is_identity(self) -> bool:
        return self.pan_x == 0 and self.pan_y == 0 and self.scale == 1

    def to_content(self, canvas_x: float, canvas_y: float) -> Point:
        """Canvas pixels -> content coordinates."""
        return Point(
            (canvas_x - self.pan_x) / self.scale,
            (canvas_y - self.pan_y) / self.scale,
        )

    def to_canvas(self, x: float, y: float) -> Point:
        """Content coordinates -> canvas pixels (the paint transform)."""
        return Point(x * self.scale + self.pan_x, y * self.scale + self.pan_y)

    def panned(self, dx: float, dy: float) -> "ViewTransform":
        return replace(self, pan_x=self.pan_x + dx, pan_y=self.pan_y + dy)

    def scaled(self, scale: float) -> "ViewTransform":
        return replace(self, scale=scale)


IDENTITY = ViewTransform()


@dataclass(frozen=True)
class SurfaceRect:
    """
    Placement of the canvas element on screen.

    Attributes:
        left: Client x of the element's left edge
        top: Client y of the element's top edge
        width: Displayed (CSS) width
        height: Displayed (CSS) height
        canvas_width: Backing-store width in canvas pixels
        canvas_height: Backing-store height in canvas pixels
    """

    left: float
    top: float
    width: float
    height: float
    canvas_width: float
    canvas_height: float

    @classmethod
    def unscaled(cls, canvas_width: float, canvas_height: float) -> "SurfaceRect":
        """Surface displayed at its natural size at the client origin."""
        return cls(0.0, 0.0, canvas_width, canvas_height, canvas_width, canvas_height)

    @property
    def pixel_ratio(self) -> Tuple[float, float]:
        """Canvas pixels per CSS pixel along x and y."""
        ratio_x = self.canvas_width / self.width if self.width > 0 else 1.0
        ratio_y = self.canvas_height / self.height if self.height > 0 else 1.0
        return ratio_x, ratio_y


def screen_to_canvas(screen_x: float, screen_y: float, surface: SurfaceRect) -> Point:
    ratio_x, ratio_y = surface.pixel_ratio
    return Point((screen_x - surface.left) * ratio_x, (screen_y - surface.top) * ratio_y)


def canvas_to_screen(canvas_x: float, canvas_y: float, surface: SurfaceRect) -> Point:
    ratio_x, ratio_y = surface.pixel_ratio
    return Point(canvas_x / ratio_x + surface.left, canvas_y / ratio_y + surface.top)


def screen_to_content(
    screen_x: float, screen_y: float, surface: SurfaceRect, view: ViewTransform
) -> Point:
    """
    Map a pointer position to content coordinates.

    Args:
        screen_x: Client x of the pointer
        screen_y: Client y of the pointer
        surface: Where the canvas is displayed
        view: Current pan/zoom

    Returns:
        Point in content space, directly comparable with box geometry
    """
    canvas_x, canvas_y = screen_to_canvas(screen_x, screen_y, surface)
    return view.to_content(canvas_x, canvas_y)


def content_to_screen(
    x: float, y: float, surface: SurfaceRect, view: ViewTransform
) -> Point:
    """Exact inverse of ``screen_to_content``."""
    canvas_x, canvas_y = view.to_canvas(x, y)
    return canvas_to_screen(canvas_x, canvas_y, surface)


def clamp_scale(scale: float, min_scale: float, max_scale: float) -> float:
    return max(min_scale, min(scale, max_scale))
