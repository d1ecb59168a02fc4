"""
Layout geometry resolver for Genkō Yōshi pages
Derives cell size, line pitch, letter spacing and content area from a writing
direction, a character grid, a base font size and the physical page.

Grid fitting floors every division so the grid never overflows the page.
The error direction is always a small gap at the trailing edge.
"""

import math
import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Tuple

from layout_config import (
    CELL_PADDING,
    CONTENT_SLACK,
    LINE_HEIGHT_MULTIPLE,
    MIN_INTERLINE_AIR,
    MM_TO_PX,
    GRID_MIN,
    GRID_MAX,
)


class WritingDirection(Enum):
    """Horizontal: left→right, lines top→bottom. Vertical: top→bottom, lines right→left."""
    HORIZONTAL = 'horizontal'
    VERTICAL = 'vertical'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        lookup = {'horizontal': cls.HORIZONTAL, 'yoko': cls.HORIZONTAL,
                  'vertical': cls.VERTICAL, 'tate': cls.VERTICAL}
        try:
            return lookup[str(value).strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown writing direction: {value!r}")


class VisualMode(Enum):
    NONE = 'none'
    RULED = 'ruled'
    GRID = 'grid'
    OUTLINE = 'outline'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        if name == 'line':
            return cls.RULED
        for mode in cls:
            if mode.value == name:
                return mode
        raise ValueError(f"Unknown visual mode: {value!r}")


# Which physical page dimension each logical axis maps to, per direction:
# (flow axis, stacking axis)
AXIS_TABLE: Dict[WritingDirection, Tuple[str, str]] = {
    WritingDirection.HORIZONTAL: ('width', 'height'),
    WritingDirection.VERTICAL: ('height', 'width'),
}


@dataclass(frozen=True)
class GridSpec:
    chars_per_line: int
    lines_per_page: int

    @classmethod
    def clamped(cls, chars_per_line, lines_per_page):
        """Build a grid spec with both counts clamped into the editor's bounds"""
        def clamp(value):
            return min(max(int(value), GRID_MIN), GRID_MAX)
        return cls(clamp(chars_per_line), clamp(lines_per_page))

    @property
    def characters_per_page(self) -> int:
        return self.chars_per_line * self.lines_per_page


@dataclass(frozen=True)
class PageDimensions:
    """Physical content area in pixels. Direction independent."""
    width: float
    height: float

    @classmethod
    def from_mm(cls, width_mm, height_mm):
        return cls(width_mm * MM_TO_PX, height_mm * MM_TO_PX)

    def along_line(self, direction: WritingDirection) -> float:
        """Length of the axis a line of text runs along"""
        return getattr(self, AXIS_TABLE[direction][0])

    def across_lines(self, direction: WritingDirection) -> float:
        """Length of the axis successive lines stack along"""
        return getattr(self, AXIS_TABLE[direction][1])


@dataclass(frozen=True)
class GeometryDescriptor:
    cell_size: float
    line_pitch: float
    effective_font_size: float
    letter_spacing: float
    centering_offset: float
    content_width: float
    content_height: float
    grid_fitting: bool = False

    def to_dict(self) -> Dict:
        return asdict(self)


def _positive_count(value) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        return 1
    return value if value > 0 else 1


def _axes_to_size(direction: WritingDirection, flow_length: float, stacking_length: float) -> Dict[str, float]:
    flow_dim, stacking_dim = AXIS_TABLE[direction]
    return {flow_dim: flow_length, stacking_dim: stacking_length}


def resolve(direction: WritingDirection, grid_spec: GridSpec, base_font_size: float,
            page_dimensions: PageDimensions, grid_fitting_enabled: bool) -> GeometryDescriptor:
    """
    Resolve the complete page geometry.

    With grid fitting the cell and pitch are derived backward from the page
    and the character grid; the glyph shrinks to the cell minus padding and
    the slack is absorbed by letter spacing. Without grid fitting they come
    forward from the font size and the content area is the raw page.
    """
    chars = _positive_count(grid_spec.chars_per_line)
    lines = _positive_count(grid_spec.lines_per_page)
    base = float(base_font_size) if base_font_size and base_font_size > 0 else 1.0

    flow_length = page_dimensions.along_line(direction)
    stacking_length = page_dimensions.across_lines(direction)

    if grid_fitting_enabled:
        # A page shorter than the grid in pixels still gets 1px cells and so
        # overflows; page formats reject margins that leave no writing area.
        cell_size = float(max(math.floor(flow_length / chars), 1))
        effective_font_size = float(max(cell_size - CELL_PADDING, 1))
        letter_spacing = max(cell_size - effective_font_size, 0.0)
        line_pitch = float(max(math.floor(stacking_length / lines), 1))
        centering_offset = float(math.floor((cell_size - effective_font_size) / 2))
        size = _axes_to_size(direction,
                             cell_size * chars + CONTENT_SLACK,
                             line_pitch * lines)
    else:
        cell_size = base + CELL_PADDING
        effective_font_size = base
        letter_spacing = 0.0
        line_pitch = max(effective_font_size * LINE_HEIGHT_MULTIPLE, cell_size + MIN_INTERLINE_AIR)
        centering_offset = 0.0
        size = _axes_to_size(direction, flow_length, stacking_length)

    descriptor = GeometryDescriptor(
        cell_size=cell_size,
        line_pitch=line_pitch,
        effective_font_size=effective_font_size,
        letter_spacing=letter_spacing,
        centering_offset=centering_offset,
        content_width=float(size['width']),
        content_height=float(size['height']),
        grid_fitting=bool(grid_fitting_enabled),
    )
    logging.debug(f"Resolved {direction.value} geometry {chars}x{lines}: {descriptor}")
    return descriptor
