"""
Background pattern generator for the manuscript surface
Turns a resolved geometry into a tileable rule pattern aligned with the grid
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from layout_config import (
    GLYPH_OPTICAL_ADJUST_Y,
    GRID_LINE_COLOR,
    OUTLINE_COLOR,
    RULED_LINE_COLOR,
    STROKE_WIDTH,
)
from layout_geometry import GeometryDescriptor, VisualMode, WritingDirection

SVG_NS = 'http://www.w3.org/2000/svg'


class RepeatAxis(Enum):
    DOWN = 'to bottom'
    LEFT = 'to left'
    BOTH = 'both'


@dataclass(frozen=True)
class TileShape:
    """A single vector primitive inside the tile: 'rect' is an unfilled outline, 'rule' a filled stripe"""
    kind: str
    x: float
    y: float
    width: float
    height: float
    stroke: str
    stroke_width: float = STROKE_WIDTH


@dataclass(frozen=True)
class TileSize:
    width: float
    height: float


@dataclass(frozen=True)
class BorderStyle:
    width: float
    color: str

    def to_css(self) -> str:
        return f"{css_number(self.width)}px solid {self.color}"


@dataclass(frozen=True)
class PatternSpec:
    tile_shape: Optional[TileShape] = None
    tile_size: Optional[TileSize] = None
    repeat_axis: Optional[RepeatAxis] = None
    placement_offset: Tuple[float, float] = (0, 0)
    anchor: str = 'left top'
    border_style: Optional[BorderStyle] = None

    @property
    def has_tile(self) -> bool:
        return self.tile_shape is not None

    def to_svg(self) -> Optional[str]:
        """Standalone SVG document for one tile, or None when there is nothing to repeat"""
        if not self.has_tile:
            return None
        shape = self.tile_shape
        if shape.kind == 'rect':
            body = (f'<rect x="{css_number(shape.x)}" y="{css_number(shape.y)}" '
                    f'width="{css_number(shape.width)}" height="{css_number(shape.height)}" '
                    f'fill="none" stroke="{shape.stroke}" stroke-width="{css_number(shape.stroke_width)}"/>')
        else:
            body = (f'<rect x="{css_number(shape.x)}" y="{css_number(shape.y)}" '
                    f'width="{css_number(shape.width)}" height="{css_number(shape.height)}" '
                    f'fill="{shape.stroke}"/>')
        return (f'<svg width="{css_number(self.tile_size.width)}" height="{css_number(self.tile_size.height)}" '
                f'xmlns="{SVG_NS}">{body}</svg>')

    def background_position(self) -> str:
        """
        CSS position of the first tile. The offset is written after each
        anchor keyword ("left 3px top -2px"); a zero horizontal offset
        keeps the short form "left top -2px".
        """
        offset_x, offset_y = self.placement_offset
        horizontal, vertical = self.anchor.split()
        if offset_x:
            return f"{horizontal} {css_number(offset_x)}px {vertical} {css_number(offset_y)}px"
        return f"{horizontal} {vertical} {css_number(offset_y)}px"

    def to_css(self) -> Dict[str, str]:
        """Background and border declarations for a CSS renderer"""
        border = self.border_style.to_css() if self.border_style else 'none'
        if not self.has_tile:
            return {'backgroundImage': 'none', 'border': border}

        if self.repeat_axis is RepeatAxis.BOTH:
            data_url = 'data:image/svg+xml,' + quote(self.to_svg(), safe="-_.!~*'()")
            return {
                'backgroundImage': f'url("{data_url}")',
                'backgroundSize': f"{css_number(self.tile_size.width)}px {css_number(self.tile_size.height)}px",
                'backgroundPosition': self.background_position(),
                'border': border,
            }

        # 1-D stripes: transparent for the whole period except the trailing rule
        period = self.tile_size.height if self.repeat_axis is RepeatAxis.DOWN else self.tile_size.width
        gradient = (f"repeating-linear-gradient({self.repeat_axis.value}, transparent, "
                    f"transparent {css_number(period - self.tile_shape.stroke_width)}px, "
                    f"{self.tile_shape.stroke} {css_number(period)}px)")
        return {'backgroundImage': gradient, 'border': border}


def css_number(value) -> str:
    """Render a length without a trailing .0"""
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:g}"


def _outline() -> BorderStyle:
    return BorderStyle(STROKE_WIDTH, OUTLINE_COLOR)


def _ruled_pattern(descriptor: GeometryDescriptor, direction: WritingDirection) -> PatternSpec:
    pitch = descriptor.line_pitch
    if direction is WritingDirection.VERTICAL:
        # Lines stack right to left; the rule sits on the far (left) edge of each column
        height = descriptor.content_height
        shape = TileShape('rule', 0, 0, STROKE_WIDTH, height, RULED_LINE_COLOR)
        return PatternSpec(shape, TileSize(pitch, height), RepeatAxis.LEFT,
                           (0, 0), 'right top', _outline())

    width = descriptor.content_width
    shape = TileShape('rule', 0, pitch - STROKE_WIDTH, width, STROKE_WIDTH, RULED_LINE_COLOR)
    return PatternSpec(shape, TileSize(width, pitch), RepeatAxis.DOWN,
                       (0, 0), 'left top', _outline())


def _grid_pattern(descriptor: GeometryDescriptor, direction: WritingDirection) -> PatternSpec:
    cell = descriptor.cell_size
    pitch = descriptor.line_pitch
    # Box centered across the line, flush with the line start
    across = max((pitch - cell) // 2, 0)

    if direction is WritingDirection.VERTICAL:
        shape = TileShape('rect', across, 0, cell, cell, GRID_LINE_COLOR)
        size = TileSize(pitch, cell)
        anchor = 'right top'
    else:
        shape = TileShape('rect', 0, across, cell, cell, GRID_LINE_COLOR)
        size = TileSize(cell, pitch)
        anchor = 'left top'

    return PatternSpec(shape, size, RepeatAxis.BOTH,
                       (0, GLYPH_OPTICAL_ADJUST_Y), anchor, _outline())


def generate_pattern(descriptor: GeometryDescriptor, direction: WritingDirection,
                     visual_mode: VisualMode) -> PatternSpec:
    """Map a resolved geometry and a visual mode to a complete pattern description"""
    if visual_mode is VisualMode.GRID:
        return _grid_pattern(descriptor, direction)
    if visual_mode is VisualMode.RULED:
        return _ruled_pattern(descriptor, direction)
    if visual_mode is VisualMode.OUTLINE:
        return PatternSpec(border_style=_outline())
    return PatternSpec()
