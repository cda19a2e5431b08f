"""The SpreadsheetML ``styleSheet`` part and the cell styles it describes."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Any

from .style_elements import (
    BUILTIN_NUM_FMTS_COUNT,
    BUILTIN_NUM_FMTS_INV,
    DEFAULT_THEME,
    Border,
    Borders,
    CellStyles,
    CellStyleXfs,
    CellXfs,
    Color,
    Colors,
    Fill,
    Fills,
    Font,
    Fonts,
    NumFmt,
    NumFmts,
    PatternFill,
    Xf,
    builtin_number_format,
)

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'
SPREADSHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _to_int(text: str) -> int:
    """Parse a decimal integer, giving 0 for anything that is not one."""
    return int(text) if _INT_RE.fullmatch(text) else 0


@dataclass
class StyleBorder:
    left: str = ""
    left_color: str = ""
    right: str = ""
    right_color: str = ""
    top: str = ""
    top_color: str = ""
    bottom: str = ""
    bottom_color: str = ""


@dataclass
class StyleFill:
    pattern_type: str = ""
    fg_color: str = ""
    bg_color: str = ""


@dataclass
class StyleFont:
    size: int = 0
    name: str = ""
    family: int = 0
    charset: int = 0
    color: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False


@dataclass
class StyleAlignment:
    horizontal: str = ""
    indent: int = 0
    shrink_to_fit: bool = False
    text_rotation: int = 0
    vertical: str = ""
    wrap_text: bool = False


@dataclass
class Style:
    """The resolved appearance of a cell."""

    border: StyleBorder = field(default_factory=StyleBorder)
    fill: StyleFill = field(default_factory=StyleFill)
    font: StyleFont = field(default_factory=StyleFont)
    alignment: StyleAlignment = field(default_factory=StyleAlignment)
    apply_border: bool = False
    apply_fill: bool = False
    apply_font: bool = False
    apply_alignment: bool = False
    named_style_index: int | None = None


class StyleSheet:
    """Fonts, fills, borders, number formats and cell formats of a workbook.

    ``theme`` may be any object offering ``theme_color(index, tint)``.
    """

    def __init__(self, theme: Any = None) -> None:
        self.theme = theme
        self.fonts = Fonts()
        self.fills = Fills()
        self.borders = Borders()
        self.colors: Colors | None = None
        self.cell_styles: CellStyles | None = None
        self.cell_style_xfs: CellStyleXfs | None = None
        self.cell_xfs = CellXfs()
        self.num_fmts: NumFmts | None = None
        self.dxf_count = 0
        self._lock = threading.RLock()
        self._style_cache: dict[int, Style] = {}
        self._num_fmt_ref_table: dict[int, NumFmt] | None = None

    def reset(self) -> None:
        """Replace the contents with the minimal set Excel expects."""
        self.fonts = Fonts()
        self.fills = Fills()
        self.borders = Borders()
        self.add_font(
            Font(
                sz="11",
                family="2",
                color=Color(theme=DEFAULT_THEME),
                name="Arial",
                scheme="minor",
            )
        )
        self.add_fill(Fill(PatternFill(pattern_type="none")))
        self.add_fill(Fill(PatternFill(pattern_type="gray125")))
        self.add_border(Border())
        self.cell_style_xfs = CellStyleXfs(count=1, xf=[Xf()])
        self.cell_xfs = CellXfs(count=1, xf=[Xf()])
        self.num_fmts = NumFmts()
        self._num_fmt_ref_table = None

    def populate_style_from_xf(self, style: Style, xf: Xf) -> None:
        """Copy the settings an xf refers to into ``style``."""
        style.apply_border = xf.apply_border
        style.apply_fill = xf.apply_fill
        style.apply_font = xf.apply_font
        style.apply_alignment = xf.apply_alignment

        if 0 <= xf.border_id < min(self.borders.count, len(self.borders.border)):
            border = self.borders.border[xf.border_id]
            style.border.left = border.left.style
            style.border.left_color = border.left.color.rgb
            style.border.right = border.right.style
            style.border.right_color = border.right.color.rgb
            style.border.top = border.top.style
            style.border.top_color = border.top.color.rgb
            style.border.bottom = border.bottom.style
            style.border.bottom_color = border.bottom.color.rgb

        if 0 <= xf.fill_id < min(self.fills.count, len(self.fills.fill)):
            pattern = self.fills.fill[xf.fill_id].pattern_fill
            style.fill.pattern_type = pattern.pattern_type
            style.fill.fg_color = self.argb_value(pattern.fg_color)
            style.fill.bg_color = self.argb_value(pattern.bg_color)

        if 0 <= xf.font_id < min(self.fonts.count, len(self.fonts.font)):
            font = self.fonts.font[xf.font_id]
            style.font.size = _to_int(font.sz)
            style.font.name = font.name
            style.font.family = _to_int(font.family)
            style.font.charset = _to_int(font.charset)
            style.font.color = self.argb_value(font.color)
            if font.b is not None and font.b != "0":
                style.font.bold = True
            if font.i is not None and font.i != "0":
                style.font.italic = True
            if font.u is not None and font.u != "0":
                style.font.underline = True

        alignment = xf.alignment
        if alignment.horizontal:
            style.alignment.horizontal = alignment.horizontal
        if alignment.vertical:
            style.alignment.vertical = alignment.vertical
        style.alignment.shrink_to_fit = alignment.shrink_to_fit
        style.alignment.wrap_text = alignment.wrap_text
        style.alignment.text_rotation = alignment.text_rotation
        if alignment.indent != 0:
            style.alignment.indent = alignment.indent

    def get_style(self, style_index: int) -> Style:
        """Return the style for a cell format index, cached after first use."""
        with self._lock:
            cached = self._style_cache.get(style_index)
        if cached is not None:
            return cached

        style = Style()
        count = min(self.cell_xfs.count, len(self.cell_xfs.xf))
        if 0 <= style_index < count:
            xf = self.cell_xfs.xf[style_index]
            self.populate_style_from_xf(style, xf)
            named = self.cell_style_xfs
            if xf.xf_id is not None and named is not None and 0 <= xf.xf_id < len(named.xf):
                style.named_style_index = xf.xf_id
                named_xf = named.xf[xf.xf_id]
                style.apply_border = style.apply_border or named_xf.apply_border
                style.apply_fill = style.apply_fill or named_xf.apply_fill
                style.apply_font = style.apply_font or named_xf.apply_font
                style.apply_alignment = style.apply_alignment or named_xf.apply_alignment
            if xf.alignment.vertical:
                style.alignment.vertical = xf.alignment.vertical
            style.alignment.wrap_text = xf.alignment.wrap_text
            style.alignment.text_rotation = xf.alignment.text_rotation
            with self._lock:
                self._style_cache[style_index] = style
        return style

    def argb_value(self, color: Color) -> str:
        """Resolve a colour through the theme or palette to an ARGB string."""
        if color.theme is not None and self.theme is not None:
            return self.theme.theme_color(color.theme, color.tint)
        if color.indexed is not None and self.colors is not None:
            return self.colors.indexed_color(color.indexed, color.tint)
        return color.rgb

    def get_number_format(self, style_index: int) -> str:
        """Return the number format code used by a cell format index."""
        number_format = "general"
        if 0 <= style_index < min(self.cell_xfs.count, len(self.cell_xfs.xf)):
            xf = self.cell_xfs.xf[style_index]
            builtin = builtin_number_format(xf.num_fmt_id)
            if builtin:
                number_format = builtin
            elif self._num_fmt_ref_table is not None:
                number_format = self._num_fmt_ref_table.get(xf.num_fmt_id, NumFmt()).format_code
        return number_format

    def add_font(self, font: Font) -> int:
        """Add a font unless an equal one exists; return its index."""
        if not font.name:
            return 0
        for index, existing in enumerate(self.fonts.font):
            if existing.matches(font):
                return index
        index = self.fonts.count
        self.fonts.add(font)
        return index

    def add_fill(self, fill: Fill) -> int:
        """Add a fill unless an equal one exists; return its index."""
        for index, existing in enumerate(self.fills.fill):
            if existing.matches(fill):
                return index
        index = self.fills.count
        self.fills.add(fill)
        return index

    def add_border(self, border: Border) -> int:
        """Add a border unless an equal one exists; return its index."""
        for index, existing in enumerate(self.borders.border):
            if existing.matches(border):
                return index
        index = self.borders.count
        self.borders.add(border)
        return index

    def add_cell_style_xf(self, xf: Xf) -> int:
        """Add a named-style xf unless an equal one exists; return its index."""
        if self.cell_style_xfs is None:
            self.cell_style_xfs = CellStyleXfs()
        for index, existing in enumerate(self.cell_style_xfs.xf):
            if existing.matches(xf):
                return index
        index = self.cell_style_xfs.count
        self.cell_style_xfs.add(xf)
        return index

    def add_cell_xf(self, xf: Xf) -> int:
        """Add a cell xf unless an equal one exists; return its index."""
        for index, existing in enumerate(self.cell_xfs.xf):
            if existing.matches(xf):
                return index
        index = self.cell_xfs.count
        self.cell_xfs.add(xf)
        return index

    def new_num_fmt(self, format_code: str) -> NumFmt:
        """Return the number format for a code, registering a custom id if needed."""
        if format_code.casefold() == "general":
            return NumFmt(0, "general")
        builtin_id = BUILTIN_NUM_FMTS_INV.get(format_code)
        if builtin_id is not None:
            return NumFmt(builtin_id, format_code)
        if self.num_fmts is not None:
            for existing in self.num_fmts.num_fmt:
                if existing.format_code == format_code:
                    return existing

        with self._lock:
            num_fmt_id = BUILTIN_NUM_FMTS_COUNT + 1
            table = self._num_fmt_ref_table or {}
            while num_fmt_id in table:
                num_fmt_id += 1
            self.add_num_fmt(NumFmt(num_fmt_id, format_code))
        return NumFmt(num_fmt_id, format_code)

    def add_num_fmt(self, num_fmt: NumFmt) -> None:
        """Register a custom number format; built-in ids and known ids are ignored."""
        if num_fmt.num_fmt_id <= BUILTIN_NUM_FMTS_COUNT:
            return
        if self._num_fmt_ref_table is None:
            self._num_fmt_ref_table = {}
        if num_fmt.num_fmt_id in self._num_fmt_ref_table:
            return
        if self.num_fmts is None:
            self.num_fmts = NumFmts()
        self.num_fmts.num_fmt.append(num_fmt)
        self._num_fmt_ref_table[num_fmt.num_fmt_id] = num_fmt
        self.num_fmts.count += 1

    def to_xml(self) -> str:
        """Render the whole styles part as an XML document."""
        parts = [XML_HEADER, f'<styleSheet xmlns="{SPREADSHEET_NS}">']
        if self.num_fmts is not None:
            parts.append(self.num_fmts.to_xml())
        font_map: dict[int, int] = {}
        fill_map: dict[int, int] = {}
        border_map: dict[int, int] = {}
        parts.append(self.fonts.to_xml(font_map))
        parts.append(self.fills.to_xml(fill_map))
        parts.append(self.borders.to_xml(border_map))
        if self.cell_style_xfs is not None:
            parts.append(self.cell_style_xfs.to_xml(border_map, fill_map, font_map))
        parts.append(self.cell_xfs.to_xml(border_map, fill_map, font_map))
        if self.cell_styles is not None:
            parts.append(self.cell_styles.to_xml())
        parts.append("</styleSheet>")
        return "".join(parts)