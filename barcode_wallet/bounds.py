"""Geometry value types and container clamping for the floating action."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    """Screen-space box (top-left origin) as reported by the toolkit."""

    left: float
    top: float
    width: float
    height: float

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


def _clamp_axis(value: float, container: float, element: float) -> float:
    upper = max(container - element, 0)
    return min(max(value, 0), upper)


def clamp_position(
    candidate: Position,
    container_size: Optional[Size],
    element_size: Optional[Size],
) -> Position:
    """Keep an element of ``element_size`` fully inside ``container_size``.

    Returns ``candidate`` untouched while either geometry is unknown; callers
    re-clamp once layout has produced both sizes.
    """
    if container_size is None or element_size is None:
        return candidate
    return Position(
        x=_clamp_axis(candidate.x, container_size.width, element_size.width),
        y=_clamp_axis(candidate.y, container_size.height, element_size.height),
    )
