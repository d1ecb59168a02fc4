"""
Text container style for the editor surface
Applies the resolved geometry to the rich-text editor: font size, line pitch,
letter spacing, the content box and the centering shift.
"""

import re
from typing import Dict, Optional

from layout_config import DEFAULT_FONT_SIZE, FREE_FONT_FAMILY, GRID_FONT_FAMILY
from layout_geometry import GeometryDescriptor, PageDimensions, WritingDirection
from background_pattern import css_number

_FONT_SIZE_RE = re.compile(r'^\s*(\d+)')

# Disable proportional metrics so each glyph takes a full em
_FIXED_TYPOGRAPHY = {
    'padding': '0',
    'boxSizing': 'content-box',
    'wordBreak': 'break-all',
    'fontFeatureSettings': '"palt" 0',
    'fontKerning': 'none',
    'fontVariantEastAsian': 'full-width',
    'fontVariantNumeric': 'tabular-nums',
}


def selection_font_size(attributes: Optional[Dict]) -> int:
    """Font size of the current selection's text style ('20px' → 20), 16 when unset"""
    raw = (attributes or {}).get('fontSize')
    if raw is None:
        return DEFAULT_FONT_SIZE
    match = _FONT_SIZE_RE.match(str(raw))
    value = int(match.group(1)) if match else 0
    return value or DEFAULT_FONT_SIZE


def toolbar_font_size(descriptor: GeometryDescriptor, attributes: Optional[Dict]) -> int:
    """Value shown in the font size picker; locked to the cell while grid fitting"""
    if descriptor.grid_fitting:
        return int(descriptor.effective_font_size)
    return selection_font_size(attributes)


def centering_transform(descriptor: GeometryDescriptor, direction: WritingDirection) -> str:
    if not descriptor.grid_fitting:
        return 'none'
    # Shift along the flow axis, the side letter spacing is added to
    if direction is WritingDirection.VERTICAL:
        return f"translateY({css_number(descriptor.centering_offset)}px)"
    return f"translateX({css_number(descriptor.centering_offset)}px)"


def build_editor_style(descriptor: GeometryDescriptor, direction: WritingDirection,
                       page: PageDimensions) -> Dict[str, str]:
    fitted = descriptor.grid_fitting
    style = {
        'fontSize': f"{css_number(descriptor.effective_font_size)}px",
        'lineHeight': f"{css_number(descriptor.line_pitch)}px",
        'letterSpacing': f"{css_number(descriptor.letter_spacing)}px" if fitted else 'normal',
    }

    if direction is WritingDirection.VERTICAL:
        style['writingMode'] = 'vertical-rl'
        style['height'] = f"{css_number(descriptor.content_height)}px" if fitted else 'auto'
        style['minWidth'] = f"{css_number(descriptor.content_width)}px" if fitted else '100%'
        style['minHeight'] = 'auto' if fitted else f"{css_number(page.height)}px"
        style['margin'] = '50px 50px 50px auto'
        style['fontFamily'] = GRID_FONT_FAMILY
    else:
        style['writingMode'] = 'horizontal-tb'
        style['width'] = f"{css_number(descriptor.content_width)}px" if fitted else '100%'
        style['maxWidth'] = 'none' if fitted else f"{css_number(page.width)}px"
        style['minHeight'] = f"{css_number(descriptor.content_height)}px"
        style['margin'] = '50px auto'
        style['fontFamily'] = GRID_FONT_FAMILY if fitted else FREE_FONT_FAMILY

    style.update(_FIXED_TYPOGRAPHY)
    return style
