"""The SpreadsheetML ``worksheet`` part: reading it and building a default one."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Union

SPREADSHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"

_CELL_REF_RE = re.compile(r"([A-Za-z]+)([0-9]+)")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})

Source = Union[str, bytes, IO[bytes], IO[str]]


class RelationshipType(str, Enum):
    HYPERLINK = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink"


class RelationshipTargetMode(str, Enum):
    EXTERNAL = "External"


@dataclass
class WorksheetRelation:
    """One entry of a worksheet's relationships part."""

    id: str = ""
    type: str = ""
    target: str = ""
    target_mode: str = ""


@dataclass
class SheetPr:
    filter_mode: bool = False
    fit_to_page: list[bool] = field(default_factory=list)


@dataclass
class Selection:
    pane: str = ""
    active_cell: str = ""
    active_cell_id: int = 0
    sqref: str = ""


@dataclass
class Pane:
    x_split: float = 0.0
    y_split: float = 0.0
    top_left_cell: str = ""
    active_pane: str = ""
    state: str = ""  # "split" or "frozen"


@dataclass
class SheetView:
    window_protection: bool = False
    show_formulas: bool = False
    show_grid_lines: bool = False
    show_row_col_headers: bool = False
    show_zeros: bool = False
    right_to_left: bool = False
    tab_selected: bool = False
    show_outline_symbols: bool = False
    default_grid_color: bool = False
    view: str = ""
    top_left_cell: str = ""
    color_id: int = 0
    zoom_scale: float = 0.0
    zoom_scale_normal: float = 0.0
    zoom_scale_page_layout_view: float = 0.0
    workbook_view_id: int = 0
    pane: Pane | None = None
    selection: list[Selection] = field(default_factory=list)


@dataclass
class SheetFormatPr:
    default_col_width: float = 0.0
    default_row_height: float = 0.0
    outline_level_col: int = 0
    outline_level_row: int = 0


@dataclass
class Col:
    collapsed: bool = False
    hidden: bool = False
    max: int = 0
    min: int = 0
    style: int = 0
    width: float = 0.0
    custom_width: bool = False
    outline_level: int = 0
    best_fit: bool = False
    phonetic: bool = False


@dataclass
class Formula:
    content: str = ""
    t: str = ""
    ref: str = ""
    si: int = 0


@dataclass
class Cell:
    """A ``c`` element; ``inline_text`` holds the text of an inline string."""

    r: str = ""
    s: int = 0
    t: str = ""
    f: Formula | None = None
    v: str = ""
    inline_text: str | None = None


@dataclass
class Row:
    r: int = 0
    spans: str = ""
    hidden: bool = False
    cells: list[Cell] = field(default_factory=list)
    ht: str = ""
    custom_height: bool = False
    outline_level: int = 0


@dataclass
class DataValidation:
    """Validation applied to a range of cells, such as a drop-down list."""

    allow_blank: bool = False
    show_input_message: bool = False
    show_error_message: bool = False
    error_style: str | None = None
    error_title: str | None = None
    operator: str = ""
    error: str | None = None
    prompt_title: str | None = None
    prompt: str | None = None
    type: str = ""
    sqref: str = ""
    formula1: str = ""
    formula2: str = ""


@dataclass
class Hyperlink:
    relationship_id: str = ""
    reference: str = ""
    display_string: str = ""
    tooltip: str = ""


@dataclass
class PrintOptions:
    headings: bool = False
    grid_lines: bool = False
    grid_lines_set: bool = False
    horizontal_centered: bool = False
    vertical_centered: bool = False


@dataclass
class PageMargins:
    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0
    header: float = 0.0
    footer: float = 0.0


@dataclass
class PageSetUp:
    paper_size: str = ""
    scale: int = 0
    first_page_number: int = 0
    fit_to_width: int = 0
    fit_to_height: int = 0
    page_order: str = ""
    orientation: str = ""
    use_printer_defaults: bool = False
    black_and_white: bool = False
    draft: bool = False
    cell_comments: str = ""
    use_first_page_number: bool = False
    horizontal_dpi: float = 0.0
    vertical_dpi: float = 0.0
    copies: int = 0


@dataclass
class HeaderFooter:
    different_first: bool = False
    different_odd_even: bool = False
    odd_header: list[str] = field(default_factory=list)
    odd_footer: list[str] = field(default_factory=list)


@dataclass
class MergeCell:
    ref: str = ""  # e.g. "A1:C1", "B3:B6" or "D3:G4"


def cell_coords(ref: str) -> tuple[int, int]:
    """Return the zero-based (column, row) of a reference such as ``"C5"``."""
    match = _CELL_REF_RE.fullmatch(ref)
    if match is None:
        raise ValueError(f"invalid cell reference {ref!r}")
    letters, digits = match.groups()
    column = 0
    for letter in letters.upper():
        column = column * 26 + (ord(letter) - ord("A") + 1)
    row = int(digits)
    if row < 1:
        raise ValueError(f"invalid row in cell reference {ref!r}")
    return column - 1, row - 1


@dataclass
class MergeCells:
    count: int = 0
    cells: list[MergeCell] = field(default_factory=list)
    cells_map: dict[str, MergeCell] = field(default_factory=dict)

    def add_cell(self, cell: MergeCell) -> None:
        """Index a merge range by the reference of its top-left cell."""
        self.cells_map[cell.ref.split(":")[0]] = cell

    def get_extent(self, cell_ref: str) -> tuple[int, int]:
        """Return the horizontal and vertical extent of a merge starting at ``cell_ref``."""
        cell = self.cells_map.get(cell_ref)
        if cell is None:
            return 0, 0
        parts = cell.ref.split(":")
        if len(parts) < 2:
            raise ValueError(f"merge range {cell.ref!r} has no end cell")
        start_x, start_y = cell_coords(parts[0])
        end_x, end_y = cell_coords(parts[1])
        return end_x - start_x, end_y - start_y


@dataclass
class Worksheet:
    sheet_pr: SheetPr = field(default_factory=SheetPr)
    dimension: str = ""
    sheet_views: list[SheetView] = field(default_factory=list)
    sheet_format_pr: SheetFormatPr = field(default_factory=SheetFormatPr)
    cols: list[Col] | None = None
    rows: list[Row] = field(default_factory=list)
    hyperlinks: list[Hyperlink] | None = None
    data_validations: list[DataValidation] | None = None
    data_validation_count: int = 0
    auto_filter: str | None = None
    merge_cells: MergeCells | None = None
    print_options: PrintOptions = field(default_factory=PrintOptions)
    page_margins: PageMargins = field(default_factory=PageMargins)
    page_set_up: PageSetUp = field(default_factory=PageSetUp)
    header_footer: HeaderFooter = field(default_factory=HeaderFooter)

    def map_merge_cells(self) -> None:
        """Index the merge ranges so that extents can be looked up quickly."""
        if self.merge_cells is not None:
            for cell in self.merge_cells.cells:
                self.merge_cells.add_cell(cell)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [c for c in element if isinstance(c.tag, str) and _local(c.tag) == name]


def _child(element: ET.Element, name: str) -> ET.Element | None:
    found = _children(element, name)
    return found[0] if found else None


def _text(element: ET.Element | None) -> str:
    return "" if element is None else element.text or ""


class _Attrs:
    """Typed access to an element's attributes, matched by local name."""

    def __init__(self, element: ET.Element) -> None:
        self._tag = _local(element.tag)
        self._values = {_local(k): v for k, v in element.attrib.items()}

    def _bad(self, name: str, value: str, kind: str) -> ValueError:
        return ValueError(f"<{self._tag}> attribute {name}={value!r} is not {kind}")

    def text(self, name: str) -> str:
        return self._values.get(name, "")

    def optional(self, name: str) -> str | None:
        return self._values.get(name)

    def integer(self, name: str, low: int | None = None, high: int | None = None) -> int:
        value = self._values.get(name, "").strip()
        if not value:
            return 0
        if not _INT_RE.fullmatch(value):
            raise self._bad(name, value, "an integer")
        number = int(value)
        if (low is not None and number < low) or (high is not None and number > high):
            raise self._bad(name, value, "in range")
        return number

    def byte(self, name: str) -> int:
        return self.integer(name, 0, 255)

    def number(self, name: str) -> float:
        value = self._values.get(name, "").strip()
        if not value:
            return 0.0
        try:
            return float(value)
        except ValueError:
            raise self._bad(name, value, "a number") from None

    def boolean(self, name: str) -> bool:
        value = self._values.get(name, "").strip()
        if not value or value in _FALSE:
            return False
        if value in _TRUE:
            return True
        raise self._bad(name, value, "a boolean")


def _parse_sheet_pr(element: ET.Element) -> SheetPr:
    return SheetPr(
        filter_mode=_Attrs(element).boolean("filterMode"),
        fit_to_page=[_Attrs(p).boolean("fitToPage") for p in _children(element, "pageSetUpPr")],
    )


def _parse_selection(element: ET.Element) -> Selection:
    a = _Attrs(element)
    return Selection(
        pane=a.text("pane"),
        active_cell=a.text("activeCell"),
        active_cell_id=a.integer("activeCellId"),
        sqref=a.text("sqref"),
    )


def _parse_pane(element: ET.Element) -> Pane:
    a = _Attrs(element)
    return Pane(
        x_split=a.number("xSplit"),
        y_split=a.number("ySplit"),
        top_left_cell=a.text("topLeftCell"),
        active_pane=a.text("activePane"),
        state=a.text("state"),
    )


def _parse_sheet_view(element: ET.Element) -> SheetView:
    a = _Attrs(element)
    pane = _child(element, "pane")
    return SheetView(
        window_protection=a.boolean("windowProtection"),
        show_formulas=a.boolean("showFormulas"),
        show_grid_lines=a.boolean("showGridLines"),
        show_row_col_headers=a.boolean("showRowColHeaders"),
        show_zeros=a.boolean("showZeros"),
        right_to_left=a.boolean("rightToLeft"),
        tab_selected=a.boolean("tabSelected"),
        show_outline_symbols=a.boolean("showOutlineSymbols"),
        default_grid_color=a.boolean("defaultGridColor"),
        view=a.text("view"),
        top_left_cell=a.text("topLeftCell"),
        color_id=a.integer("colorId"),
        zoom_scale=a.number("zoomScale"),
        zoom_scale_normal=a.number("zoomScaleNormal"),
        zoom_scale_page_layout_view=a.number("zoomScalePageLayoutView"),
        workbook_view_id=a.integer("workbookViewId"),
        pane=_parse_pane(pane) if pane is not None else None,
        selection=[_parse_selection(s) for s in _children(element, "selection")],
    )


def _parse_sheet_format_pr(element: ET.Element) -> SheetFormatPr:
    a = _Attrs(element)
    return SheetFormatPr(
        default_col_width=a.number("defaultColWidth"),
        default_row_height=a.number("defaultRowHeight"),
        outline_level_col=a.byte("outlineLevelCol"),
        outline_level_row=a.byte("outlineLevelRow"),
    )


def _parse_col(element: ET.Element) -> Col:
    a = _Attrs(element)
    return Col(
        collapsed=a.boolean("collapsed"),
        hidden=a.boolean("hidden"),
        max=a.integer("max"),
        min=a.integer("min"),
        style=a.integer("style"),
        width=a.number("width"),
        custom_width=a.boolean("customWidth"),
        outline_level=a.byte("outlineLevel"),
        best_fit=a.boolean("bestFit"),
        phonetic=a.boolean("phonetic"),
    )


def _parse_cell(element: ET.Element) -> Cell:
    a = _Attrs(element)
    formula = _child(element, "f")
    inline = _child(element, "is")
    return Cell(
        r=a.text("r"),
        s=a.integer("s"),
        t=a.text("t"),
        f=(
            Formula(
                content=_text(formula),
                t=_Attrs(formula).text("t"),
                ref=_Attrs(formula).text("ref"),
                si=_Attrs(formula).integer("si"),
            )
            if formula is not None
            else None
        ),
        v=_text(_child(element, "v")),
        inline_text=(
            "".join(t.text or "" for t in inline.iter() if _local(t.tag) == "t")
            if inline is not None
            else None
        ),
    )


def _parse_row(element: ET.Element) -> Row:
    a = _Attrs(element)
    return Row(
        r=a.integer("r"),
        spans=a.text("spans"),
        hidden=a.boolean("hidden"),
        cells=[_parse_cell(c) for c in _children(element, "c")],
        ht=a.text("ht"),
        custom_height=a.boolean("customHeight"),
        outline_level=a.byte("outlineLevel"),
    )


def _parse_data_validation(element: ET.Element) -> DataValidation:
    a = _Attrs(element)
    return DataValidation(
        allow_blank=a.boolean("allowBlank"),
        show_input_message=a.boolean("showInputMessage"),
        show_error_message=a.boolean("showErrorMessage"),
        error_style=a.optional("errorStyle"),
        error_title=a.optional("errorTitle"),
        operator=a.text("operator"),
        error=a.optional("error"),
        prompt_title=a.optional("promptTitle"),
        prompt=a.optional("prompt"),
        type=a.text("type"),
        sqref=a.text("sqref"),
        formula1=_text(_child(element, "formula1")),
        formula2=_text(_child(element, "formula2")),
    )


def _parse_hyperlink(element: ET.Element) -> Hyperlink:
    a = _Attrs(element)
    return Hyperlink(
        relationship_id=a.text("id"),
        reference=a.text("ref"),
        display_string=a.text("display"),
        tooltip=a.text("tooltip"),
    )


def _parse_print_options(element: ET.Element) -> PrintOptions:
    a = _Attrs(element)
    return PrintOptions(
        headings=a.boolean("headings"),
        grid_lines=a.boolean("gridLines"),
        grid_lines_set=a.boolean("gridLinesSet"),
        horizontal_centered=a.boolean("horizontalCentered"),
        vertical_centered=a.boolean("verticalCentered"),
    )


def _parse_page_margins(element: ET.Element) -> PageMargins:
    a = _Attrs(element)
    return PageMargins(
        left=a.number("left"),
        right=a.number("right"),
        top=a.number("top"),
        bottom=a.number("bottom"),
        header=a.number("header"),
        footer=a.number("footer"),
    )


def _parse_page_set_up(element: ET.Element) -> PageSetUp:
    a = _Attrs(element)
    return PageSetUp(
        paper_size=a.text("paperSize"),
        scale=a.integer("scale"),
        first_page_number=a.integer("firstPageNumber"),
        fit_to_width=a.integer("fitToWidth"),
        fit_to_height=a.integer("fitToHeight"),
        page_order=a.text("pageOrder"),
        orientation=a.text("orientation"),
        use_printer_defaults=a.boolean("usePrinterDefaults"),
        black_and_white=a.boolean("blackAndWhite"),
        draft=a.boolean("draft"),
        cell_comments=a.text("cellComments"),
        use_first_page_number=a.boolean("useFirstPageNumber"),
        horizontal_dpi=a.number("horizontalDpi"),
        vertical_dpi=a.number("verticalDpi"),
        copies=a.integer("copies"),
    )


def _parse_header_footer(element: ET.Element) -> HeaderFooter:
    a = _Attrs(element)
    return HeaderFooter(
        different_first=a.boolean("differentFirst"),
        different_odd_even=a.boolean("differentOddEven"),
        odd_header=[_text(h) for h in _children(element, "oddHeader")],
        odd_footer=[_text(f) for f in _children(element, "oddFooter")],
    )


def _parse_merge_cells(element: ET.Element) -> MergeCells:
    return MergeCells(
        count=_Attrs(element).integer("count"),
        cells=[MergeCell(_Attrs(m).text("ref")) for m in _children(element, "mergeCell")],
    )


def _read_root(source: Source) -> ET.Element:
    try:
        if isinstance(source, (str, bytes)):
            return ET.fromstring(source)
        return ET.parse(source).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"malformed XML: {exc}") from exc


def parse_worksheet(source: Source) -> Worksheet:
    """Read a worksheet part from XML text, bytes or a file object.

    Merge ranges are indexed before the worksheet is returned.
    """
    root = _read_root(source)
    if root.tag != f"{{{SPREADSHEET_NS}}}worksheet":
        raise ValueError(f"expected a worksheet element, found <{_local(root.tag)}>")

    worksheet = Worksheet()
    parsers = {
        "sheetPr": lambda e: setattr(worksheet, "sheet_pr", _parse_sheet_pr(e)),
        "dimension": lambda e: setattr(worksheet, "dimension", _Attrs(e).text("ref")),
        "sheetViews": lambda e: setattr(
            worksheet, "sheet_views", [_parse_sheet_view(v) for v in _children(e, "sheetView")]
        ),
        "sheetFormatPr": lambda e: setattr(worksheet, "sheet_format_pr", _parse_sheet_format_pr(e)),
        "cols": lambda e: setattr(worksheet, "cols", [_parse_col(c) for c in _children(e, "col")]),
        "sheetData": lambda e: setattr(worksheet, "rows", [_parse_row(r) for r in _children(e, "row")]),
        "hyperlinks": lambda e: setattr(
            worksheet, "hyperlinks", [_parse_hyperlink(h) for h in _children(e, "hyperlink")]
        ),
        "autoFilter": lambda e: setattr(worksheet, "auto_filter", _Attrs(e).text("ref")),
        "mergeCells": lambda e: setattr(worksheet, "merge_cells", _parse_merge_cells(e)),
        "printOptions": lambda e: setattr(worksheet, "print_options", _parse_print_options(e)),
        "pageMargins": lambda e: setattr(worksheet, "page_margins", _parse_page_margins(e)),
        "pageSetup": lambda e: setattr(worksheet, "page_set_up", _parse_page_set_up(e)),
        "headerFooter": lambda e: setattr(worksheet, "header_footer", _parse_header_footer(e)),
    }
    for child in root:
        if not isinstance(child.tag, str):
            continue
        name = _local(child.tag)
        if name == "dataValidations":
            worksheet.data_validations = [
                _parse_data_validation(d) for d in _children(child, "dataValidation")
            ]
            worksheet.data_validation_count = _Attrs(child).integer("count")
        elif name in parsers:
            parsers[name](child)

    worksheet.map_merge_cells()
    return worksheet


def new_worksheet() -> Worksheet:
    """Return a worksheet populated with the defaults used for new sheets."""
    return Worksheet(
        sheet_pr=SheetPr(filter_mode=False, fit_to_page=[False]),
        sheet_views=[
            SheetView(
                color_id=64,
                default_grid_color=True,
                right_to_left=False,
                selection=[
                    Selection(pane="topLeft", active_cell="A1", active_cell_id=0, sqref="A1")
                ],
                show_formulas=False,
                show_grid_lines=True,
                show_outline_symbols=True,
                show_row_col_headers=True,
                show_zeros=True,
                tab_selected=False,
                top_left_cell="A1",
                view="normal",
                window_protection=False,
                workbook_view_id=0,
                zoom_scale=100,
                zoom_scale_normal=100,
                zoom_scale_page_layout_view=100,
            )
        ],
        sheet_format_pr=SheetFormatPr(default_row_height=12.85),
        print_options=PrintOptions(
            headings=False,
            grid_lines=False,
            grid_lines_set=True,
            horizontal_centered=False,
            vertical_centered=False,
        ),
        page_margins=PageMargins(
            left=0.7875,
            right=0.7875,
            top=1.05277777777778,
            bottom=1.05277777777778,
            header=0.7875,
            footer=0.7875,
        ),
        page_set_up=PageSetUp(
            paper_size="9",
            scale=100,
            first_page_number=1,
            fit_to_width=1,
            fit_to_height=1,
            page_order="downThenOver",
            orientation="portrait",
            use_printer_defaults=False,
            black_and_white=False,
            draft=False,
            cell_comments="none",
            use_first_page_number=True,
            horizontal_dpi=300,
            vertical_dpi=300,
            copies=1,
        ),
        header_footer=HeaderFooter(
            odd_header=['&C&"Times New Roman,Regular"&12&A'],
            odd_footer=['&C&"Times New Roman,Regular"&12Page &P'],
        ),
    )