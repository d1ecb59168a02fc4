#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the editor-facing layers: settings, editor style, paper formats,
document files, the DOCX print export and the command line
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from layout_config import FREE_FONT_FAMILY, GRID_FONT_FAMILY, OUTLINE_COLOR, RULED_LINE_COLOR
from layout_geometry import GridSpec, PageDimensions, VisualMode, WritingDirection, resolve
from layout_settings import LayoutSettings
from background_pattern import generate_pattern
from editor_style import (
    build_editor_style,
    centering_transform,
    selection_font_size,
    toolbar_font_size,
)
from document_io import (
    DocumentCorruptedError,
    document_paragraphs,
    empty_document,
    open_document,
    parse_document,
    save_document,
    serialize_document,
)
from genkou_helpers import build_manuscript_document, layout_characters, table_borders
from sizes import PageSizeSelector
import genkou

SAMPLE_TREE = {
    'type': 'doc',
    'content': [
        {'type': 'heading', 'attrs': {'level': 1}, 'content': [{'type': 'text', 'text': '吾輩は猫である'}]},
        {'type': 'paragraph', 'content': [
            {'type': 'text', 'text': '名前はまだ無い。'},
            {'type': 'hardBreak'},
            {'type': 'text', 'marks': [{'type': 'bold'}], 'text': 'どこで生れたか'},
        ]},
        {'type': 'paragraph'},
        {'type': 'bulletList', 'content': [
            {'type': 'listItem', 'content': [
                {'type': 'paragraph', 'content': [{'type': 'text', 'text': '一'}]},
            ]},
        ]},
    ],
}


class TestLayoutSettings(unittest.TestCase):
    """Test cases for LayoutSettings"""

    def setUp(self):
        """Set up test fixtures"""
        self.settings = LayoutSettings()
        self.page = PageDimensions(624, 926)

    def test_defaults(self):
        """Test default settings"""
        self.assertIs(self.settings.direction, WritingDirection.HORIZONTAL)
        self.assertEqual(self.settings.grid, GridSpec(20, 20))
        self.assertIs(self.settings.visual_mode, VisualMode.RULED)
        self.assertEqual(self.settings.font_size, 16)
        self.assertTrue(self.settings.grid_fitting)

    def test_updates_return_new_values(self):
        """Test actions never mutate the original settings"""
        vertical = self.settings.with_direction('vertical')
        self.assertTrue(vertical.is_vertical)
        self.assertFalse(self.settings.is_vertical)

    def test_none_mode_disables_grid_fitting(self):
        """Test only the 'none' mode turns grid fitting off"""
        self.assertFalse(self.settings.with_visual_mode('none').grid_fitting)
        self.assertTrue(self.settings.with_visual_mode('outline').grid_fitting)

    def test_apply_grid_settings_clamps(self):
        """Test grid settings are clamped and replaced wholesale"""
        updated = self.settings.apply_grid_settings(3, 500)
        self.assertEqual(updated.grid, GridSpec(5, 100))

    def test_apply_grid_preset(self):
        """Test manuscript presets"""
        self.assertEqual(self.settings.apply_grid_preset('20x10').grid, GridSpec(20, 10))
        with self.assertRaises(ValueError):
            self.settings.apply_grid_preset('30x30')

    def test_font_size_clamp(self):
        """Test font size bounds"""
        self.assertEqual(self.settings.with_font_size(200).font_size, 72)
        self.assertEqual(self.settings.with_font_size(1).font_size, 8)

    def test_zoom_by_wheel(self):
        """Test ctrl+wheel zoom steps and bounds"""
        self.assertEqual(self.settings.zoom_by_wheel(120).zoom, 90)
        self.assertEqual(self.settings.zoom_by_wheel(-120).zoom, 110)
        self.assertEqual(self.settings.with_zoom(50).zoom_by_wheel(120).zoom, 50)
        self.assertEqual(self.settings.with_zoom(500).zoom, 200)

    def test_render(self):
        """Test render chains the resolver into the pattern generator"""
        settings = self.settings.with_visual_mode('grid')
        descriptor, pattern = settings.render(self.page)
        self.assertEqual(descriptor, resolve(WritingDirection.HORIZONTAL, GridSpec(20, 20), 16, self.page, True))
        self.assertEqual(pattern.tile_size.width, descriptor.cell_size)


class TestEditorStyle(unittest.TestCase):
    """Test cases for the editor text container style"""

    def setUp(self):
        """Set up test fixtures"""
        self.page = PageDimensions(624, 926)
        self.grid = GridSpec(20, 20)

    def test_selection_font_size(self):
        """Test reading the selection font size"""
        self.assertEqual(selection_font_size({'fontSize': '20px'}), 20)
        self.assertEqual(selection_font_size({'fontSize': 'large'}), 16)
        self.assertEqual(selection_font_size({}), 16)
        self.assertEqual(selection_font_size(None), 16)

    def test_toolbar_font_size(self):
        """Test the picker shows the automatic size while grid fitting"""
        fitted = resolve(WritingDirection.HORIZONTAL, self.grid, 16, self.page, True)
        free = resolve(WritingDirection.HORIZONTAL, self.grid, 16, self.page, False)
        self.assertEqual(toolbar_font_size(fitted, {'fontSize': '12px'}), 25)
        self.assertEqual(toolbar_font_size(free, {'fontSize': '12px'}), 12)

    def test_centering_transform(self):
        """Test the centering shift follows the flow axis"""
        h = resolve(WritingDirection.HORIZONTAL, self.grid, 16, self.page, True)
        v = resolve(WritingDirection.VERTICAL, self.grid, 16, self.page, True)
        free = resolve(WritingDirection.HORIZONTAL, self.grid, 16, self.page, False)
        self.assertEqual(centering_transform(h, WritingDirection.HORIZONTAL), 'translateX(3px)')
        self.assertEqual(centering_transform(v, WritingDirection.VERTICAL), 'translateY(3px)')
        self.assertEqual(centering_transform(free, WritingDirection.HORIZONTAL), 'none')

    def test_horizontal_grid_style(self):
        """Test the horizontal content box takes the fitted size"""
        d = resolve(WritingDirection.HORIZONTAL, self.grid, 16, self.page, True)
        style = build_editor_style(d, WritingDirection.HORIZONTAL, self.page)
        self.assertEqual(style['writingMode'], 'horizontal-tb')
        self.assertEqual(style['width'], '621px')
        self.assertEqual(style['minHeight'], '920px')
        self.assertEqual(style['fontSize'], '25px')
        self.assertEqual(style['lineHeight'], '46px')
        self.assertEqual(style['letterSpacing'], '6px')
        self.assertEqual(style['fontFamily'], GRID_FONT_FAMILY)

    def test_vertical_grid_style(self):
        """Test the vertical content box"""
        d = resolve(WritingDirection.VERTICAL, self.grid, 16, self.page, True)
        style = build_editor_style(d, WritingDirection.VERTICAL, self.page)
        self.assertEqual(style['writingMode'], 'vertical-rl')
        self.assertEqual(style['height'], f"{46 * 20 + 1}px")
        self.assertEqual(style['minWidth'], f"{31 * 20}px")

    def test_free_style(self):
        """Test the free layout fills the page with normal spacing"""
        d = resolve(WritingDirection.HORIZONTAL, self.grid, 16, self.page, False)
        style = build_editor_style(d, WritingDirection.HORIZONTAL, self.page)
        self.assertEqual(style['width'], '100%')
        self.assertEqual(style['maxWidth'], '624px')
        self.assertEqual(style['letterSpacing'], 'normal')
        self.assertEqual(style['fontFamily'], FREE_FONT_FAMILY)


class TestPageSizeSelector(unittest.TestCase):
    """Test cases for PageSizeSelector"""

    def test_get_format(self):
        """Test format retrieval"""
        bunko = PageSizeSelector.get_format('bunko')
        self.assertIsNotNone(bunko)
        self.assertEqual(bunko['name'], 'Bunko')
        self.assertEqual(bunko, PageSizeSelector.get_format('BUNKO'))
        self.assertIsNone(PageSizeSelector.get_format('invalid'))
        self.assertIsNone(PageSizeSelector.get_format(None))

    def test_editor_a4_content_area(self):
        """Test the default format leaves a 165×245mm writing area"""
        fmt = PageSizeSelector.default_format()
        self.assertEqual(PageSizeSelector.content_area_mm(fmt), (165, 245))
        page = PageSizeSelector.page_dimensions(fmt)
        self.assertAlmostEqual(page.width, 623.7)
        self.assertAlmostEqual(page.height, 926.1)

    def test_default_grid(self):
        """Test suggested grids are clamped GridSpecs"""
        self.assertEqual(PageSizeSelector.default_grid(PageSizeSelector.get_format('bunko')), GridSpec(24, 17))

    def test_calculate_grid_dimensions(self):
        """Test grid suggestion for a custom paper size"""
        margins = {'top': 25, 'bottom': 25, 'inner': 20, 'outer': 20}
        grid = PageSizeSelector.calculate_grid_dimensions(210, 297, margins)
        self.assertEqual(grid['character_size'], 9)
        self.assertEqual(grid['chars'], 27)
        self.assertEqual(grid['lines'], 18)
        self.assertEqual(grid['characters_per_page'], 27 * 18)

    def test_margins_leave_no_area(self):
        """Test oversized margins are rejected instead of clamped to zero"""
        fmt = {'width': 100, 'height': 150,
               'margins': {'top': 80, 'bottom': 80, 'inner': 20, 'outer': 20}}
        with self.assertRaises(ValueError):
            PageSizeSelector.content_area_mm(fmt)
        with self.assertRaises(ValueError):
            PageSizeSelector.page_dimensions(fmt)

    def test_custom_format_prompts_again(self):
        """Test the custom format prompt repeats until the margins fit"""
        answers = ['100', '150', '80', '80', '20', '20',
                   '210', '297', '26', '26', '22.5', '22.5']
        console = Mock()
        with patch('sizes.Prompt.ask', side_effect=answers):
            custom = PageSizeSelector(console=console)._prompt_custom_format()
        self.assertEqual(custom['width'], 210)
        self.assertEqual(PageSizeSelector.content_area_mm(custom), (165, 245))
        self.assertTrue(any('no writing area' in str(call.args[0])
                            for call in console.print.call_args_list))
        grid = PageSizeSelector.default_grid(custom)
        d = resolve(WritingDirection.HORIZONTAL, grid, 16, PageSizeSelector.page_dimensions(custom), True)
        self.assertLessEqual(d.cell_size * grid.chars_per_line, PageSizeSelector.page_dimensions(custom).width)

    def test_all_formats_resolve(self):
        """Test every catalogued format yields a fitting grid"""
        for name, fmt in PageSizeSelector.PAGE_FORMATS.items():
            with self.subTest(format=name):
                page = PageSizeSelector.page_dimensions(fmt)
                grid = PageSizeSelector.default_grid(fmt)
                d = resolve(WritingDirection.VERTICAL, grid, 16, page, True)
                self.assertGreater(d.cell_size, 0)
                self.assertLessEqual(d.cell_size * grid.chars_per_line, page.height)


class TestDocumentIO(unittest.TestCase):
    """Test cases for document save/open"""

    def setUp(self):
        """Set up test fixtures"""
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, 'manuscript.json')

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_save_and_open(self):
        """Test the blob survives a save/open round trip as UTF-8"""
        content = serialize_document(SAMPLE_TREE)
        result = save_document(content, self.path)
        self.assertTrue(result.success)
        self.assertEqual(result.file_path, self.path)
        self.assertIn('吾輩', Path(self.path).read_text(encoding='utf-8'))

        opened = open_document(self.path)
        self.assertFalse(opened.canceled)
        self.assertEqual(parse_document(opened.content), SAMPLE_TREE)

    def test_save_as_prompts_for_path(self):
        """Test a save without a path asks for one"""
        ask = Mock(return_value=self.path)
        result = save_document('{}', ask_path=ask)
        ask.assert_called_once()
        self.assertTrue(result.success)

    def test_save_cancelled(self):
        """Test a cancelled save reports failure without an error"""
        result = save_document('{}', ask_path=lambda: None)
        self.assertFalse(result.success)
        self.assertIsNone(result.error)
        self.assertFalse(save_document('{}').success)

    def test_save_failure(self):
        """Test an unwritable path reports the error"""
        with self.assertLogs(level='ERROR'):
            result = save_document('{}', os.path.join(self.tmpdir.name, 'missing', 'x.json'))
        self.assertFalse(result.success)
        self.assertTrue(result.error)

    def test_open_cancelled(self):
        """Test opening without a path is a cancellation"""
        result = open_document()
        self.assertTrue(result.canceled)
        self.assertIsNone(result.error)

    def test_open_missing_file(self):
        """Test a missing file is cancelled with an error"""
        with self.assertLogs(level='ERROR'):
            result = open_document(os.path.join(self.tmpdir.name, 'nope.json'))
        self.assertTrue(result.canceled)
        self.assertTrue(result.error)

    def test_open_non_utf8(self):
        """Test Shift_JIS files decode to the original text"""
        text = json.dumps({'type': 'doc', 'text': '吾輩は猫である。名前はまだ無い。' * 20}, ensure_ascii=False)
        Path(self.path).write_bytes(text.encode('shift_jis'))
        result = open_document(self.path)
        self.assertFalse(result.canceled)
        self.assertEqual(result.content, text)
        self.assertEqual(parse_document(result.content)['text'][:7], '吾輩は猫である')

    def test_parse_corrupted(self):
        """Test malformed blobs raise DocumentCorruptedError"""
        for content in ('{"type": "doc"', '[1, 2]', '{"content": []}', ''):
            with self.subTest(content=content):
                with self.assertRaises(DocumentCorruptedError):
                    parse_document(content)

    def test_document_paragraphs(self):
        """Test flattening the editor tree into lines"""
        self.assertEqual(document_paragraphs(SAMPLE_TREE),
                         ['吾輩は猫である', '名前はまだ無い。', 'どこで生れたか', '', '一'])
        self.assertEqual(document_paragraphs(empty_document()), [''])

    def test_document_paragraphs_malformed_content(self):
        """Test stray strings and non-list content are skipped"""
        cases = {
            'string item': ('{"type":"doc","content":[{"type":"paragraph","content":["oops"]}]}', ['']),
            'string content': ('{"type":"doc","content":[{"type":"paragraph","content":"text"}]}', ['']),
            'string root content': ('{"type":"doc","content":"text"}', []),
            'mixed': ('{"type":"doc","content":[{"type":"paragraph","content":'
                      '[7, {"type":"text","text":"猫"}, null]}]}', ['猫']),
        }
        for name, (content, expected) in cases.items():
            with self.subTest(case=name):
                self.assertEqual(document_paragraphs(parse_document(content)), expected)


class TestManuscriptExport(unittest.TestCase):
    """Test cases for the DOCX print export"""

    def test_layout_characters_wraps(self):
        """Test lines wrap at the characters per line"""
        lines = layout_characters(['あ' * 25, '', 'い'], GridSpec(20, 20))
        self.assertEqual(lines, ['あ' * 20, 'あ' * 5, '', 'い'])

    def test_layout_characters_overflow(self):
        """Test text past one page is dropped with a warning"""
        with self.assertLogs(level='WARNING'):
            lines = layout_characters(['う'] * 8, GridSpec(20, 5))
        self.assertEqual(len(lines), 5)

    def test_table_borders(self):
        """Test table borders follow the background pattern"""
        page = PageDimensions(624, 926)
        d = resolve(WritingDirection.HORIZONTAL, GridSpec(20, 20), 16, page, True)
        ruled = table_borders(generate_pattern(d, WritingDirection.HORIZONTAL, VisualMode.RULED))
        self.assertEqual(ruled['insideH'], RULED_LINE_COLOR)
        self.assertEqual(ruled['top'], OUTLINE_COLOR)
        self.assertNotIn('insideV', ruled)
        outline = table_borders(generate_pattern(d, WritingDirection.HORIZONTAL, VisualMode.OUTLINE))
        self.assertEqual(set(outline), {'top', 'left', 'bottom', 'right'})
        self.assertEqual(table_borders(generate_pattern(d, WritingDirection.HORIZONTAL, VisualMode.NONE)), {})

    def test_horizontal_sheet(self):
        """Test a horizontal sheet has one row per line"""
        settings = LayoutSettings().with_visual_mode('grid').apply_grid_settings(10, 5)
        doc = build_manuscript_document(['原稿用紙'], settings)
        table = doc.tables[0]
        self.assertEqual(len(table.rows), 5)
        self.assertEqual(len(table.columns), 10)
        self.assertEqual(table.cell(0, 0).text, '原')
        self.assertEqual(table.cell(0, 3).text, '紙')
        self.assertEqual(table.cell(1, 0).text, '')

    def test_vertical_sheet(self):
        """Test a vertical sheet starts in the rightmost column"""
        settings = (LayoutSettings().with_direction('vertical')
                    .with_visual_mode('ruled').apply_grid_settings(10, 5))
        doc = build_manuscript_document(['縦書き', '二行目'], settings)
        table = doc.tables[0]
        self.assertEqual(len(table.rows), 10)
        self.assertEqual(len(table.columns), 5)
        self.assertEqual(table.cell(0, 4).text, '縦')
        self.assertEqual(table.cell(2, 4).text, 'き')
        self.assertEqual(table.cell(0, 3).text, '二')

    def test_sheet_saves(self):
        """Test the sheet can be written to disk"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'sheet.docx')
            build_manuscript_document(['テスト'], LayoutSettings()).save(path)
            self.assertGreater(os.path.getsize(path), 0)


class TestCommandLine(unittest.TestCase):
    """Integration tests for the genkou command"""

    def setUp(self):
        """Set up test fixtures"""
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def _path(self, name):
        return os.path.join(self.tmpdir.name, name)

    def test_json_report(self):
        """Test geometry JSON export"""
        out = self._path('geometry.json')
        self.assertEqual(genkou.main(['--mode', 'grid', '--json', out]), 0)
        with open(out, encoding='utf-8') as f:
            report = json.load(f)
        self.assertEqual(report['geometry']['cell_size'], 31)
        self.assertEqual(report['pattern']['repeat_axis'], 'both')
        self.assertTrue(report['pattern']['tile_svg'].startswith('<svg'))

    def test_svg_and_docx_export(self):
        """Test SVG tile and DOCX sheet from an input document"""
        source = self._path('doc.json')
        Path(source).write_text(serialize_document(SAMPLE_TREE), encoding='utf-8')
        svg = self._path('tile.svg')
        docx_path = self._path('sheet.docx')
        saved = self._path('copy.json')
        genkou.main([source, '-d', 'vertical', '-m', 'grid', '--preset', '20x10',
                     '--svg', svg, '-o', docx_path, '--save', saved, '--css'])
        self.assertTrue(Path(svg).read_text(encoding='utf-8').startswith('<svg'))
        self.assertGreater(os.path.getsize(docx_path), 0)
        self.assertEqual(parse_document(Path(saved).read_text(encoding='utf-8')), SAMPLE_TREE)

    def test_corrupted_input(self):
        """Test a corrupted document exits with status 1"""
        source = self._path('broken.json')
        Path(source).write_text('{"type": ', encoding='utf-8')
        with self.assertRaises(SystemExit) as cm:
            genkou.main([source])
        self.assertEqual(cm.exception.code, 1)

    def test_docx_export_malformed_tree(self):
        """Test a structurally odd document still exports a sheet"""
        for name, content in (('items', '{"type":"doc","content":[{"type":"paragraph","content":["oops"]}]}'),
                              ('string', '{"type":"doc","content":[{"type":"paragraph","content":"text"}]}')):
            with self.subTest(shape=name):
                source = self._path(f'{name}.json')
                Path(source).write_text(content, encoding='utf-8')
                docx_path = self._path(f'{name}.docx')
                self.assertEqual(genkou.main([source, '-o', docx_path]), 0)
                self.assertGreater(os.path.getsize(docx_path), 0)

    def test_unknown_format(self):
        """Test an unknown paper format exits with status 1"""
        with self.assertRaises(SystemExit) as cm:
            genkou.main(['--format', 'letter'])
        self.assertEqual(cm.exception.code, 1)


if __name__ == '__main__':
    unittest.main(verbosity=2, buffer=True)
