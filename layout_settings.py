"""
Editor layout settings and the actions that update them
Every action returns a new settings value; nothing is mutated in place.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Tuple

from layout_config import (
    DEFAULT_CHARS_PER_LINE,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINES_PER_PAGE,
    DEFAULT_ZOOM,
    FONT_SIZE_MAX,
    FONT_SIZE_MIN,
    GRID_PRESETS,
    ZOOM_MAX,
    ZOOM_MIN,
    ZOOM_STEP,
)
from layout_geometry import (
    GeometryDescriptor,
    GridSpec,
    PageDimensions,
    VisualMode,
    WritingDirection,
    resolve,
)
from background_pattern import PatternSpec, generate_pattern


@dataclass(frozen=True)
class LayoutSettings:
    direction: WritingDirection = WritingDirection.HORIZONTAL
    grid: GridSpec = field(default_factory=lambda: GridSpec(DEFAULT_CHARS_PER_LINE, DEFAULT_LINES_PER_PAGE))
    visual_mode: VisualMode = VisualMode.RULED
    font_size: int = DEFAULT_FONT_SIZE
    zoom: int = DEFAULT_ZOOM

    @property
    def grid_fitting(self) -> bool:
        """Any decorated mode fits the text to the character grid"""
        return self.visual_mode is not VisualMode.NONE

    @property
    def is_vertical(self) -> bool:
        return self.direction is WritingDirection.VERTICAL

    def with_direction(self, direction) -> 'LayoutSettings':
        return replace(self, direction=WritingDirection.parse(direction))

    def with_visual_mode(self, visual_mode) -> 'LayoutSettings':
        return replace(self, visual_mode=VisualMode.parse(visual_mode))

    def with_font_size(self, font_size) -> 'LayoutSettings':
        clamped = min(max(int(font_size), FONT_SIZE_MIN), FONT_SIZE_MAX)
        if clamped != font_size:
            logging.debug(f"Font size {font_size} clamped to {clamped}")
        return replace(self, font_size=clamped)

    def apply_grid_settings(self, chars_per_line, lines_per_page) -> 'LayoutSettings':
        """Replace the grid wholesale with clamped counts"""
        grid = GridSpec.clamped(chars_per_line, lines_per_page)
        if (grid.chars_per_line, grid.lines_per_page) != (chars_per_line, lines_per_page):
            logging.warning(
                f"Grid {chars_per_line}x{lines_per_page} clamped to "
                f"{grid.chars_per_line}x{grid.lines_per_page}")
        return replace(self, grid=grid)

    def apply_grid_preset(self, preset: str) -> 'LayoutSettings':
        """Apply a manuscript preset such as '20x20'"""
        try:
            values = GRID_PRESETS[preset.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown grid preset: {preset!r} (choose from {', '.join(GRID_PRESETS)})")
        return self.apply_grid_settings(values['chars'], values['lines'])

    def with_zoom(self, zoom) -> 'LayoutSettings':
        return replace(self, zoom=min(max(int(zoom), ZOOM_MIN), ZOOM_MAX))

    def zoom_by_wheel(self, delta_y) -> 'LayoutSettings':
        """Ctrl+wheel zoom: scrolling down zooms out one step"""
        step = -ZOOM_STEP if delta_y > 0 else ZOOM_STEP
        return self.with_zoom(self.zoom + step)

    def resolve(self, page: PageDimensions) -> GeometryDescriptor:
        return resolve(self.direction, self.grid, self.font_size, page, self.grid_fitting)

    def render(self, page: PageDimensions) -> Tuple[GeometryDescriptor, PatternSpec]:
        """Resolve the geometry and the background that goes with it"""
        descriptor = self.resolve(page)
        return descriptor, generate_pattern(descriptor, self.direction, self.visual_mode)
