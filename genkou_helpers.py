"""
Print export helpers: render the current page as a genkou yoshi DOCX sheet
The table cells take their size from the resolved geometry, and the borders
follow the background pattern of the active visual mode.
"""

import logging
from typing import List

from docx import Document
from docx.enum.section import WD_ORIENTATION
from docx.enum.table import WD_ROW_HEIGHT_RULE, WD_TABLE_ALIGNMENT
from docx.enum.text import WD_PARAGRAPH_ALIGNMENT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Mm, Pt

from layout_config import (
    DOCX_FONT_NAME,
    GRID_LINE_COLOR,
    PX_TO_PT,
    RULED_LINE_COLOR,
)
from layout_geometry import GeometryDescriptor, GridSpec, WritingDirection
from background_pattern import PatternSpec, RepeatAxis
from sizes import PageSizeSelector

OUTER_BORDERS = ('top', 'left', 'bottom', 'right')
BORDER_SIZE = '4'  # eighths of a point


def _docx_color(css_color):
    value = css_color.lstrip('#')
    if len(value) == 3:
        value = ''.join(ch * 2 for ch in value)
    return value.upper()


def table_borders(pattern: PatternSpec):
    """Border name → colour for the table, following the background pattern"""
    borders = {}
    if pattern.border_style:
        for name in OUTER_BORDERS:
            borders[name] = pattern.border_style.color
    if pattern.repeat_axis is RepeatAxis.BOTH:
        for name in OUTER_BORDERS + ('insideH', 'insideV'):
            borders[name] = GRID_LINE_COLOR
    elif pattern.repeat_axis is RepeatAxis.DOWN:
        borders['insideH'] = RULED_LINE_COLOR
    elif pattern.repeat_axis is RepeatAxis.LEFT:
        borders['insideV'] = RULED_LINE_COLOR
    return borders


def configure_genkou_table(table, pattern: PatternSpec, descriptor: GeometryDescriptor,
                           direction: WritingDirection):
    """
    Configure table to look like the on-screen manuscript surface
    """
    tbl = table._tbl
    tblPr = tbl.tblPr

    # Fixed layout keeps every cell at the resolved size
    tblLayout = OxmlElement('w:tblLayout')
    tblLayout.set(qn('w:type'), 'fixed')
    tblPr.append(tblLayout)

    borders = table_borders(pattern)
    tblBorders = OxmlElement('w:tblBorders')
    for border_name in OUTER_BORDERS + ('insideH', 'insideV'):
        border = OxmlElement(f'w:{border_name}')
        color = borders.get(border_name)
        if color:
            border.set(qn('w:val'), 'single')
            border.set(qn('w:sz'), BORDER_SIZE)
            border.set(qn('w:color'), _docx_color(color))
        else:
            border.set(qn('w:val'), 'nil')
        tblBorders.append(border)
    tblPr.append(tblBorders)

    if direction is WritingDirection.VERTICAL:
        column_width = Pt(descriptor.line_pitch * PX_TO_PT)
        row_height = Pt(descriptor.cell_size * PX_TO_PT)
    else:
        column_width = Pt(descriptor.cell_size * PX_TO_PT)
        row_height = Pt(descriptor.line_pitch * PX_TO_PT)

    for row in table.rows:
        row.height = row_height
        row.height_rule = WD_ROW_HEIGHT_RULE.EXACTLY
        for cell in row.cells:
            cell.width = column_width


def configure_genkou_cell(cell, character, font_size_points, font_name, direction: WritingDirection):
    """
    Configure individual cell for one character of the manuscript
    """
    cell.text = ''

    tcPr = cell._tc.get_or_add_tcPr()

    vAlign = OxmlElement('w:vAlign')
    vAlign.set(qn('w:val'), 'center')
    tcPr.append(vAlign)

    if direction is WritingDirection.VERTICAL:
        textDirection = OxmlElement('w:textDirection')
        textDirection.set(qn('w:val'), 'tbRl')
        tcPr.append(textDirection)

    # No cell margins: the glyph is centred by the paragraph, not by padding
    tcMar = OxmlElement('w:tcMar')
    for margin in ['top', 'left', 'bottom', 'right']:
        mar = OxmlElement(f'w:{margin}')
        mar.set(qn('w:w'), '0')
        mar.set(qn('w:type'), 'dxa')
        tcMar.append(mar)
    tcPr.append(tcMar)

    paragraph = cell.paragraphs[0]
    paragraph.alignment = WD_PARAGRAPH_ALIGNMENT.CENTER
    paragraph.paragraph_format.space_before = Pt(0)
    paragraph.paragraph_format.space_after = Pt(0)

    if character and character.strip():
        run = paragraph.add_run(character)
        run.font.name = font_name
        run.font.size = Pt(font_size_points)


def layout_characters(paragraphs: List[str], grid: GridSpec) -> List[str]:
    """
    Break paragraphs into page lines of at most chars_per_line characters.
    Every paragraph starts a new line; lines past the page are dropped.
    """
    chars = max(grid.chars_per_line, 1)
    lines = []
    for paragraph in paragraphs:
        if not paragraph:
            lines.append('')
            continue
        for start in range(0, len(paragraph), chars):
            lines.append(paragraph[start:start + chars])

    if len(lines) > grid.lines_per_page:
        logging.warning(f"Text needs {len(lines)} lines, page holds {grid.lines_per_page}; "
                        f"overflow is not printed")
        lines = lines[:grid.lines_per_page]
    return lines


def build_manuscript_document(paragraphs: List[str], settings, page_format=None, font_name=DOCX_FONT_NAME):
    """Build a one-page DOCX of the current page for printing"""
    page_format = page_format or PageSizeSelector.default_format()
    page = PageSizeSelector.page_dimensions(page_format)
    descriptor, pattern = settings.render(page)
    grid = settings.grid

    doc = Document()
    section = doc.sections[0]
    section.orientation = WD_ORIENTATION.PORTRAIT
    section.page_width = Mm(page_format['width'])
    section.page_height = Mm(page_format['height'])
    margins = page_format['margins']
    section.top_margin = Mm(margins['top'])
    section.bottom_margin = Mm(margins['bottom'])
    section.left_margin = Mm(margins['inner'])
    section.right_margin = Mm(margins['outer'])

    # Drop the default empty paragraph so the sheet starts at the top margin
    for p in list(doc.paragraphs):
        p._element.getparent().remove(p._element)

    lines = layout_characters(paragraphs, grid)
    vertical = settings.direction is WritingDirection.VERTICAL
    if vertical:
        table = doc.add_table(rows=grid.chars_per_line, cols=grid.lines_per_page)
    else:
        table = doc.add_table(rows=grid.lines_per_page, cols=grid.chars_per_line)
    table.alignment = WD_TABLE_ALIGNMENT.RIGHT if vertical else WD_TABLE_ALIGNMENT.LEFT
    configure_genkou_table(table, pattern, descriptor, settings.direction)

    font_size_points = descriptor.effective_font_size * PX_TO_PT
    for line_index in range(grid.lines_per_page):
        text = lines[line_index] if line_index < len(lines) else ''
        for char_index in range(grid.chars_per_line):
            character = text[char_index] if char_index < len(text) else ''
            if vertical:
                # Lines run right to left across the table's columns
                cell = table.cell(char_index, grid.lines_per_page - 1 - line_index)
            else:
                cell = table.cell(line_index, char_index)
            configure_genkou_cell(cell, character, font_size_points, font_name, settings.direction)

    logging.info(f"Built {settings.direction.value} manuscript sheet "
                 f"{grid.chars_per_line}x{grid.lines_per_page} ({settings.visual_mode.value})")
    return doc
