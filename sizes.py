"""
Paper formats for the Genkō Yōshi editor
Based on standard Japanese publishing formats; each format's content area
(paper minus margins) becomes the page the layout resolver fits the grid into.
"""
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table
from rich import box

from layout_config import MM_TO_PX
from layout_geometry import GridSpec, PageDimensions


class PageSizeSelector:
    """Catalogue of paper formats with their margins and suggested character grid"""

    # Sizes and margins in mm. 'chars' runs along a line, 'lines' counts lines per page.
    PAGE_FORMATS = {
        'editor_a4': {
            'name': 'Editor A4',
            'width': 210,
            'height': 297,
            'grid': {'chars': 20, 'lines': 20},
            'margins': {'top': 26, 'bottom': 26, 'inner': 22.5, 'outer': 22.5},
            'description': 'A4 with a 165×245mm writing area (default)',
        },
        'genkou_yoshi_20x20': {
            'name': 'Genkou Yoshi 20×20',
            'width': 200,
            'height': 290,
            'grid': {'chars': 20, 'lines': 20},
            'margins': {'top': 25, 'bottom': 25, 'inner': 20, 'outer': 20},
            'description': 'Traditional 400字詰 manuscript sheet',
        },
        'genkou_yoshi_20x10': {
            'name': 'Genkou Yoshi 20×10',
            'width': 200,
            'height': 290,
            'grid': {'chars': 20, 'lines': 10},
            'margins': {'top': 25, 'bottom': 25, 'inner': 20, 'outer': 20},
            'description': 'Traditional 200字詰 manuscript sheet',
        },
        'bunko': {
            'name': 'Bunko',
            'width': 105,
            'height': 148,
            'grid': {'chars': 24, 'lines': 17},
            'margins': {'top': 15, 'bottom': 15, 'inner': 12, 'outer': 8},
            'description': 'Standard mass-market paperback fiction',
        },
        'tankobon': {
            'name': 'Tankobon',
            'width': 127,
            'height': 188,
            'grid': {'chars': 28, 'lines': 18},
            'margins': {'top': 18, 'bottom': 15, 'inner': 15, 'outer': 12},
            'description': 'Standard first edition hardcover/quality paperback',
        },
        'shinsho': {
            'name': 'Shinsho',
            'width': 103,
            'height': 182,
            'grid': {'chars': 28, 'lines': 16},
            'margins': {'top': 18, 'bottom': 15, 'inner': 12, 'outer': 8},
            'description': 'Standard non-fiction paperback format',
        },
        'a5': {
            'name': 'A5',
            'width': 148,
            'height': 210,
            'grid': {'chars': 32, 'lines': 20},
            'margins': {'top': 20, 'bottom': 20, 'inner': 15, 'outer': 12},
            'description': 'Large format novels and literary works',
        },
        'b5': {
            'name': 'B5',
            'width': 176,
            'height': 250,
            'grid': {'chars': 30, 'lines': 20},
            'margins': {'top': 20, 'bottom': 20, 'inner': 18, 'outer': 15},
            'description': 'Large format books and textbooks',
        },
        'b6': {
            'name': 'B6',
            'width': 128,
            'height': 182,
            'grid': {'chars': 28, 'lines': 18},
            'margins': {'top': 18, 'bottom': 15, 'inner': 12, 'outer': 10},
            'description': 'Medium hardcover format',
        },
        'a4': {
            'name': 'A4',
            'width': 210,
            'height': 297,
            'grid': {'chars': 34, 'lines': 22},
            'margins': {'top': 25, 'bottom': 25, 'inner': 20, 'outer': 20},
            'description': 'Standard document size',
        },
    }

    DEFAULT_FORMAT = 'editor_a4'

    # Display order for the interactive picker
    COMMON_SIZES = [
        PAGE_FORMATS['editor_a4'],
        PAGE_FORMATS['genkou_yoshi_20x20'],
        PAGE_FORMATS['genkou_yoshi_20x10'],
        PAGE_FORMATS['bunko'],
        PAGE_FORMATS['tankobon'],
        PAGE_FORMATS['shinsho'],
        PAGE_FORMATS['a5'],
        PAGE_FORMATS['b5'],
        PAGE_FORMATS['b6'],
        PAGE_FORMATS['a4'],
    ]

    _FORMAT_LOOKUP = {name.lower(): fmt for name, fmt in PAGE_FORMATS.items()}

    def __init__(self, console=None):
        self.console = console or Console()

    @classmethod
    def get_format(cls, format_name):
        """Case-insensitive format lookup, None when unknown"""
        if not format_name:
            return None
        return cls._FORMAT_LOOKUP.get(format_name.lower())

    @classmethod
    def default_format(cls):
        return cls.PAGE_FORMATS[cls.DEFAULT_FORMAT]

    @staticmethod
    def content_area_mm(page_format):
        """
        Writing area of a format: paper minus margins, in mm.
        Raises ValueError when the margins leave no writing area.
        """
        margins = page_format['margins']
        width = page_format['width'] - margins['inner'] - margins['outer']
        height = page_format['height'] - margins['top'] - margins['bottom']
        if width <= 0 or height <= 0:
            raise ValueError(f"Margins leave no writing area ({width:g}×{height:g}mm)")
        return width, height

    @classmethod
    def page_dimensions(cls, page_format) -> PageDimensions:
        width_mm, height_mm = cls.content_area_mm(page_format)
        return PageDimensions.from_mm(width_mm, height_mm)

    @staticmethod
    def default_grid(page_format) -> GridSpec:
        grid = page_format['grid']
        return GridSpec.clamped(grid['chars'], grid['lines'])

    @staticmethod
    def calculate_grid_dimensions(page_width, page_height, margins, character_size=None):
        """
        Suggest a character grid for a custom paper size.
        Character size (mm) scales with the writing width when not given.
        """
        text_width = page_width - margins['inner'] - margins['outer']
        text_height = page_height - margins['top'] - margins['bottom']

        if character_size is None:
            character_size = 6 if text_width < 80 else 7 if text_width < 100 else 8 if text_width < 150 else 9

        chars = max(10, int(text_height / character_size))
        lines = max(5, int(text_width / character_size))
        # Even line counts fold into two facing halves
        lines = lines - (lines % 2)

        return {
            'chars': chars,
            'lines': lines,
            'characters_per_page': chars * lines,
            'character_size': character_size,
        }

    def show_sizes(self):
        table = Table(title="Paper Formats", box=box.ROUNDED, expand=False)
        table.add_column("#", style="cyan", width=3, justify="right")
        table.add_column("Format", style="green", width=20)
        table.add_column("Paper", style="blue", width=12, justify="center")
        table.add_column("Writing area", style="blue", width=22, justify="center")
        table.add_column("Grid", style="magenta", width=14, justify="center")
        table.add_column("Description", style="yellow")

        for i, fmt in enumerate(self.COMMON_SIZES, 1):
            width_mm, height_mm = self.content_area_mm(fmt)
            area = (f"{width_mm:g}×{height_mm:g}mm "
                    f"({width_mm * MM_TO_PX:.0f}×{height_mm * MM_TO_PX:.0f}px)")
            grid = fmt['grid']
            table.add_row(
                str(i),
                fmt['name'],
                f"{fmt['width']}×{fmt['height']}mm",
                area,
                f"{grid['chars']}×{grid['lines']}",
                fmt['description'],
            )
        table.add_row(str(len(self.COMMON_SIZES) + 1), "Custom", "-", "-", "-", "Custom user-defined format")

        self.console.print(table)

    def select_page_size(self):
        """Interactive picker; returns a format dict"""
        self.show_sizes()
        self.console.print("\n[bold cyan]Select a page format:[/bold cyan]")

        valid_choices = [str(i) for i in range(1, len(self.COMMON_SIZES) + 2)]
        choice = Prompt.ask("Enter selection", choices=valid_choices, default="1", console=self.console)
        index = int(choice) - 1

        if index == len(self.COMMON_SIZES):
            return self._prompt_custom_format()

        selected = dict(self.COMMON_SIZES[index])
        self.console.print(f"\n[bold green]✓ Selected:[/bold green] {selected['name']} "
                           f"({selected['width']}×{selected['height']}mm)")
        return selected

    def _prompt_custom_format(self):
        self.console.print("\n[bold cyan]Custom Page Dimensions:[/bold cyan]")
        while True:
            width = float(Prompt.ask("Width (mm)", default="210", console=self.console))
            height = float(Prompt.ask("Height (mm)", default="297", console=self.console))

            self.console.print("\n[bold cyan]Margins:[/bold cyan]")
            margins = {
                'top': float(Prompt.ask("Top margin (mm)", default="26", console=self.console)),
                'bottom': float(Prompt.ask("Bottom margin (mm)", default="26", console=self.console)),
                'inner': float(Prompt.ask("Inner margin (mm)", default="22.5", console=self.console)),
                'outer': float(Prompt.ask("Outer margin (mm)", default="22.5", console=self.console)),
            }
            try:
                self.content_area_mm({'width': width, 'height': height, 'margins': margins})
                break
            except ValueError as e:
                self.console.print(f"[bold red]{e}. Enter the dimensions again.[/bold red]")

        grid = self.calculate_grid_dimensions(width, height, margins)
        custom = {
            'name': 'Custom',
            'width': width,
            'height': height,
            'grid': {'chars': grid['chars'], 'lines': grid['lines']},
            'margins': margins,
            'description': f"Custom {width:g}×{height:g}mm format",
        }

        self.console.print(f"\n[bold green]✓ Custom format created:[/bold green] {width:g}×{height:g}mm")
        self.console.print(f"[bold green]✓ Suggested grid:[/bold green] {grid['chars']}×{grid['lines']} "
                           f"({grid['characters_per_page']} characters/page)")
        return custom
