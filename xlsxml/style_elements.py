"""Elements of the SpreadsheetML ``styleSheet`` part and their XML form."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_THEME = 1

# Number formats with an id up to this value are built in to Excel.
BUILTIN_NUM_FMTS_COUNT = 163

BUILTIN_NUM_FMTS: dict[int, str] = {
    0: "general",
    1: "0",
    2: "0.00",
    3: "#,##0",
    4: "#,##0.00",
    9: "0%",
    10: "0.00%",
    11: "0.00e+00",
    12: "# ?/?",
    13: "# ??/??",
    14: "mm-dd-yy",
    15: "d-mmm-yy",
    16: "d-mmm",
    17: "mmm-yy",
    18: "h:mm am/pm",
    19: "h:mm:ss am/pm",
    20: "h:mm",
    21: "h:mm:ss",
    22: "m/d/yy h:mm",
    37: "#,##0 ;(#,##0)",
    38: "#,##0 ;[red](#,##0)",
    39: "#,##0.00;(#,##0.00)",
    40: "#,##0.00;[red](#,##0.00)",
    41: r'_(* #,##0_);_(* \(#,##0\);_(* "-"_);_(@_)',
    42: r'_("$"* #,##0_);_("$* \(#,##0\);_("$"* "-"_);_(@_)',
    43: r'_(* #,##0.00_);_(* \(#,##0.00\);_(* "-"??_);_(@_)',
    44: r'_("$"* #,##0.00_);_("$"* \(#,##0.00\);_("$"* "-"??_);_(@_)',
    45: "mm:ss",
    46: "[h]:mm:ss",
    47: "mmss.0",
    48: "##0.0e+0",
    49: "@",
}

BUILTIN_NUM_FMTS_INV: dict[str, int] = {code: num for num, code in BUILTIN_NUM_FMTS.items()}

# Colour annotations that may appear in number format codes.
NUM_FMT_COLOR_CODES = (
    "[red]",
    "[black]",
    "[green]",
    "[white]",
    "[blue]",
    "[magenta]",
    "[yellow]",
    "[cyan]",
)

BUILTIN_NUM_FMT_INDEX_GENERAL = 0
BUILTIN_NUM_FMT_INDEX_INT = 1
BUILTIN_NUM_FMT_INDEX_FLOAT = 2
BUILTIN_NUM_FMT_INDEX_DATE = 14
BUILTIN_NUM_FMT_INDEX_STRING = 49

_ESCAPES = {
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
}


def _is_xml_char(ch: str) -> bool:
    code = ord(ch)
    return (
        code in (0x09, 0x0A, 0x0D)
        or 0x20 <= code <= 0xD7FF
        or 0xE000 <= code <= 0xFFFD
        or 0x10000 <= code <= 0x10FFFF
    )


def _escape(text: str) -> str:
    """Escape text for use in XML character data or attribute values."""
    return "".join(
        _ESCAPES.get(ch, ch) if _is_xml_char(ch) else "\ufffd" for ch in text
    )


def _flag(value: bool) -> int:
    return 1 if value else 0


def builtin_number_format(num_fmt_id: int) -> str:
    """Return the built-in format code for an id, or an empty string."""
    return BUILTIN_NUM_FMTS.get(num_fmt_id, "")


@dataclass
class Color:
    """A colour given as RGB, theme index or palette index."""

    rgb: str = ""
    theme: int | None = None
    tint: float = 0.0
    indexed: int | None = None

    def matches(self, other: Color) -> bool:
        return self.rgb == other.rgb


@dataclass
class Font:
    """A font definition; ``b``, ``i``, ``u`` and ``scheme`` are None when absent."""

    sz: str = ""
    name: str = ""
    family: str = ""
    charset: str = ""
    color: Color = field(default_factory=Color)
    b: str | None = None
    i: str | None = None
    u: str | None = None
    scheme: str | None = None

    def matches(self, other: Font) -> bool:
        if (self.b is None) != (other.b is None):
            return False
        if (self.i is None) != (other.i is None):
            return False
        if (self.u is None) != (other.u is None):
            return False
        return (
            self.sz == other.sz
            and self.name == other.name
            and self.family == other.family
            and self.charset == other.charset
            and self.color.matches(other.color)
        )

    def to_xml(self) -> str:
        parts = ["<font>"]
        if self.sz:
            parts.append(f'<sz val="{self.sz}"/>')
        if self.name:
            parts.append(f'<name val="{self.name}"/>')
        if self.family:
            parts.append(f'<family val="{self.family}"/>')
        if self.charset:
            parts.append(f'<charset val="{self.charset}"/>')
        if self.color.rgb:
            parts.append(f'<color rgb="{self.color.rgb}"/>')
        if self.color.theme is not None:
            parts.append(f'<color theme="{self.color.theme}" />')
        if self.scheme:
            parts.append(f'<scheme val="{self.scheme}"/>')
        if self.b is not None:
            parts.append("<b/>")
        if self.i is not None:
            parts.append("<i/>")
        if self.u is not None:
            parts.append("<u/>")
        parts.append("</font>")
        return "".join(parts)


@dataclass
class PatternFill:
    pattern_type: str = ""
    fg_color: Color = field(default_factory=Color)
    bg_color: Color = field(default_factory=Color)

    def matches(self, other: PatternFill) -> bool:
        return (
            self.pattern_type == other.pattern_type
            and self.fg_color.matches(other.fg_color)
            and self.bg_color.matches(other.bg_color)
        )

    def to_xml(self) -> str:
        subparts = ""
        if self.fg_color.rgb:
            subparts += f'<fgColor rgb="{self.fg_color.rgb}"/>'
        if self.bg_color.rgb:
            subparts += f'<bgColor rgb="{self.bg_color.rgb}"/>'
        head = f'<patternFill patternType="{self.pattern_type}"'
        if not subparts:
            return head + "/>"
        return f"{head}>{subparts}</patternFill>"


@dataclass
class Fill:
    pattern_fill: PatternFill = field(default_factory=PatternFill)

    def matches(self, other: Fill) -> bool:
        return self.pattern_fill.matches(other.pattern_fill)

    def to_xml(self) -> str:
        """Return the fill element, or an empty string when it has no pattern."""
        if not self.pattern_fill.pattern_type:
            return ""
        return f"<fill>{self.pattern_fill.to_xml()}</fill>"


@dataclass
class Line:
    style: str = ""
    color: Color = field(default_factory=Color)

    def matches(self, other: Line) -> bool:
        return self.style == other.style and self.color.matches(other.color)


@dataclass
class Border:
    left: Line = field(default_factory=Line)
    right: Line = field(default_factory=Line)
    top: Line = field(default_factory=Line)
    bottom: Line = field(default_factory=Line)

    def matches(self, other: Border) -> bool:
        return (
            self.left.matches(other.left)
            and self.right.matches(other.right)
            and self.top.matches(other.top)
            and self.bottom.matches(other.bottom)
        )

    @staticmethod
    def _line_xml(line: Line, name: str) -> str:
        if not line.style:
            return f"<{name}/>"
        inner = f'<color rgb="{line.color.rgb}"/>' if line.color.rgb else ""
        return f'<{name} style="{line.style}">{inner}</{name}>'

    def to_xml(self) -> str:
        # Excel needs every side present, empty ones included.
        sides = (
            (self.left, "left"),
            (self.right, "right"),
            (self.top, "top"),
            (self.bottom, "bottom"),
        )
        inner = "".join(self._line_xml(line, name) for line, name in sides)
        return f"<border>{inner}</border>"


@dataclass
class Alignment:
    horizontal: str = ""
    indent: int = 0
    shrink_to_fit: bool = False
    text_rotation: int = 0
    vertical: str = ""
    wrap_text: bool = False

    def matches(self, other: Alignment) -> bool:
        return (
            self.horizontal == other.horizontal
            and self.indent == other.indent
            and self.shrink_to_fit == other.shrink_to_fit
            and self.text_rotation == other.text_rotation
            and self.vertical == other.vertical
            and self.wrap_text == other.wrap_text
        )

    def to_xml(self) -> str:
        horizontal = self.horizontal or "general"
        vertical = self.vertical or "bottom"
        return (
            f'<alignment horizontal="{horizontal}" indent="{self.indent}" '
            f'shrinkToFit="{_flag(self.shrink_to_fit)}" '
            f'textRotation="{self.text_rotation}" vertical="{vertical}" '
            f'wrapText="{_flag(self.wrap_text)}"/>'
        )


@dataclass
class Xf:
    """A cell format record referring to fonts, fills, borders and number formats."""

    apply_alignment: bool = False
    apply_border: bool = False
    apply_font: bool = False
    apply_fill: bool = False
    apply_number_format: bool = False
    apply_protection: bool = False
    border_id: int = 0
    fill_id: int = 0
    font_id: int = 0
    num_fmt_id: int = 0
    xf_id: int | None = None
    alignment: Alignment = field(default_factory=Alignment)

    def matches(self, other: Xf) -> bool:
        return (
            self.apply_alignment == other.apply_alignment
            and self.apply_border == other.apply_border
            and self.apply_font == other.apply_font
            and self.apply_fill == other.apply_fill
            and self.apply_protection == other.apply_protection
            and self.border_id == other.border_id
            and self.fill_id == other.fill_id
            and self.font_id == other.font_id
            and self.num_fmt_id == other.num_fmt_id
            and self.xf_id == other.xf_id
            and self.alignment.matches(other.alignment)
        )

    def to_xml(
        self,
        border_map: dict[int, int],
        fill_map: dict[int, int],
        font_map: dict[int, int],
    ) -> str:
        """Render the xf, renumbering ids through the given output maps."""
        result = (
            f'<xf applyAlignment="{_flag(self.apply_alignment)}" '
            f'applyBorder="{_flag(self.apply_border)}" '
            f'applyFont="{_flag(self.apply_font)}" '
            f'applyFill="{_flag(self.apply_fill)}" '
            f'applyNumberFormat="{_flag(self.apply_number_format)}" '
            f'applyProtection="{_flag(self.apply_protection)}" '
            f'borderId="{border_map.get(self.border_id, 0)}" '
            f'fillId="{fill_map.get(self.fill_id, 0)}" '
            f'fontId="{font_map.get(self.font_id, 0)}" '
            f'numFmtId="{self.num_fmt_id}"'
        )
        if self.xf_id is not None:
            result += f' xfId="{self.xf_id}"'
        return result + ">" + self.alignment.to_xml() + "</xf>"


@dataclass
class NumFmt:
    num_fmt_id: int = 0
    format_code: str = ""

    def to_xml(self) -> str:
        return (
            f'<numFmt numFmtId="{self.num_fmt_id}" '
            f'formatCode="{_escape(self.format_code)}"/>'
        )


@dataclass
class NumFmts:
    count: int = 0
    num_fmt: list[NumFmt] = field(default_factory=list)

    def to_xml(self) -> str:
        if self.count <= 0:
            return ""
        inner = "".join(fmt.to_xml() for fmt in self.num_fmt)
        return f'<numFmts count="{self.count}">{inner}</numFmts>'


@dataclass
class Fonts:
    count: int = 0
    font: list[Font] = field(default_factory=list)

    def add(self, font: Font) -> None:
        self.font.append(font)
        self.count += 1

    def to_xml(self, font_map: dict[int, int]) -> str:
        """Render the fonts, recording each font's output position in ``font_map``."""
        subparts = []
        for index, font in enumerate(self.font):
            xml = font.to_xml()
            if xml:
                font_map[index] = len(subparts)
                subparts.append(xml)
        if not subparts:
            return ""
        return f'<fonts count="{self.count}">{"".join(subparts)}</fonts>'


@dataclass
class Fills:
    count: int = 0
    fill: list[Fill] = field(default_factory=list)

    def add(self, fill: Fill) -> None:
        self.fill.append(fill)
        self.count += 1

    def to_xml(self, fill_map: dict[int, int]) -> str:
        """Render the non-empty fills, recording their output positions in ``fill_map``."""
        subparts = []
        for index, fill in enumerate(self.fill):
            xml = fill.to_xml()
            if xml:
                fill_map[index] = len(subparts)
                subparts.append(xml)
        if not subparts:
            return ""
        return f'<fills count="{len(subparts)}">{"".join(subparts)}</fills>'


@dataclass
class Borders:
    count: int = 0
    border: list[Border] = field(default_factory=list)

    def add(self, border: Border) -> None:
        self.border.append(border)
        self.count += 1

    def to_xml(self, border_map: dict[int, int]) -> str:
        """Render the borders, recording their output positions in ``border_map``."""
        subparts = []
        for index, border in enumerate(self.border):
            xml = border.to_xml()
            if xml:
                border_map[index] = len(subparts)
                subparts.append(xml)
        if not subparts:
            return ""
        return f'<borders count="{len(subparts)}">{"".join(subparts)}</borders>'


@dataclass
class CellStyle:
    name: str = ""
    xf_id: int = 0
    builtin_id: int | None = None
    custom_builtin: bool | None = None
    hidden: bool | None = None
    i_level: bool | None = None

    def to_xml(self) -> str:
        attrs = []
        if self.builtin_id is not None:
            attrs.append(f'builtInId="{self.builtin_id}"')
        for attr, value in (
            ("customBuiltIn", self.custom_builtin),
            ("hidden", self.hidden),
            ("iLevel", self.i_level),
        ):
            if value is not None:
                attrs.append(f'{attr}="{"true" if value else "false"}"')
        attrs.append(f'name="{_escape(self.name)}"')
        attrs.append(f'xfId="{self.xf_id}"')
        return f"<cellStyle {' '.join(attrs)}></cellStyle>"


@dataclass
class CellStyles:
    count: int = 0
    cell_style: list[CellStyle] = field(default_factory=list)

    def to_xml(self) -> str:
        if self.count <= 0:
            return ""
        inner = "".join(style.to_xml() for style in self.cell_style)
        return f'<cellStyles count="{self.count}">{inner}</cellStyles>'


def _xfs_xml(
    tag: str,
    count: int,
    xfs: list[Xf],
    border_map: dict[int, int],
    fill_map: dict[int, int],
    font_map: dict[int, int],
) -> str:
    if count <= 0:
        return ""
    inner = "".join(xf.to_xml(border_map, fill_map, font_map) for xf in xfs)
    return f'<{tag} count="{count}">{inner}</{tag}>'


@dataclass
class CellStyleXfs:
    count: int = 0
    xf: list[Xf] = field(default_factory=list)

    def add(self, xf: Xf) -> None:
        self.xf.append(xf)
        self.count += 1

    def to_xml(
        self,
        border_map: dict[int, int],
        fill_map: dict[int, int],
        font_map: dict[int, int],
    ) -> str:
        return _xfs_xml("cellStyleXfs", self.count, self.xf, border_map, fill_map, font_map)


@dataclass
class CellXfs:
    count: int = 0
    xf: list[Xf] = field(default_factory=list)

    def add(self, xf: Xf) -> None:
        self.xf.append(xf)
        self.count += 1

    def to_xml(
        self,
        border_map: dict[int, int],
        fill_map: dict[int, int],
        font_map: dict[int, int],
    ) -> str:
        return _xfs_xml("cellXfs", self.count, self.xf, border_map, fill_map, font_map)


@dataclass
class Colors:
    """Custom palette: indexed RGB colours and most recently used colours."""

    indexed_colors: list[str] = field(default_factory=list)
    mru_colors: list[Color] = field(default_factory=list)

    def indexed_color(self, index: int, tint: float) -> str:
        """Return the RGB value of a one-based palette entry."""
        if index < 1:
            raise IndexError(f"palette index {index} out of range")
        return self.indexed_colors[index - 1]