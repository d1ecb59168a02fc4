"""
Layout constants for the Genkō Yōshi editor
Shared by the geometry resolver, the background pattern generator and the editor style
"""

# Physical length to screen pixels (96 dpi: 1 mm ≈ 3.78 px). Fixed, not user configurable.
MM_TO_PX = 3.78

# CSS pixels to points for DOCX export (72 / 96)
PX_TO_PT = 0.75

# Editor content area: A4 minus margins
CONTENT_WIDTH_MM = 165
CONTENT_HEIGHT_MM = 245

# Minimum visual breathing room around a glyph inside its cell
CELL_PADDING = 6

# Readability-driven line multiple when line pitch comes from the font
LINE_HEIGHT_MULTIPLE = 1.75

# Minimum interline air between a cell and the next line
MIN_INTERLINE_AIR = 2

# Extra unit along the flow axis so the last cell's stroke is not clipped
CONTENT_SLACK = 1

# Glyph optical centering correction for the grid tile origin.
# Tuned for MS Gothic / Hiragino Kaku Gothic; other families may need another value.
GLYPH_OPTICAL_ADJUST_Y = -2

# Rule and border colours
GRID_LINE_COLOR = '#8bc34a'
RULED_LINE_COLOR = '#e0e0e0'
OUTLINE_COLOR = '#ccc'
STROKE_WIDTH = 1

# Input bounds enforced before values reach the resolver
DEFAULT_FONT_SIZE = 16
FONT_SIZE_MIN = 8
FONT_SIZE_MAX = 72
FONT_SIZE_CHOICES = (12, 16, 20, 24)

GRID_MIN = 5
GRID_MAX = 100
DEFAULT_CHARS_PER_LINE = 20
DEFAULT_LINES_PER_PAGE = 20

# Traditional manuscript presets offered in grid mode
GRID_PRESETS = {
    '20x20': {'chars': 20, 'lines': 20, 'label': '400字詰 (20字 × 20行)'},
    '20x10': {'chars': 20, 'lines': 10, 'label': '200字詰 (20字 × 10行)'},
}

ZOOM_MIN = 50
ZOOM_MAX = 200
ZOOM_STEP = 10
DEFAULT_ZOOM = 100

# Font stacks
GRID_FONT_FAMILY = '"MS Gothic", "Hiragino Kaku Gothic ProN", monospace'
FREE_FONT_FAMILY = '"Inter", "MS Mincho", sans-serif'
DOCX_FONT_NAME = 'MS Gothic'
