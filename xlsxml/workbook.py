"""The SpreadsheetML ``workbook`` part and locating the worksheets it lists."""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from .style_elements import _escape
from .worksheet import (
    SPREADSHEET_NS,
    Source,
    Worksheet,
    _Attrs,
    _child,
    _children,
    _local,
    _read_root,
    parse_worksheet,
)

PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
OFFICE_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

NO_ROW_LIMIT = -1


class SheetState(str, Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"
    VERY_HIDDEN = "veryHidden"


@dataclass
class WorkbookRelation:
    """Maps a relationship id to the part it targets."""

    id: str = ""
    target: str = ""
    type: str = ""


@dataclass
class FileVersion:
    app_name: str = ""
    last_edited: str = ""
    lowest_edited: str = ""
    rup_build: str = ""


@dataclass
class WorkbookPr:
    default_theme_version: str = ""
    backup_file: bool = False
    show_objects: str = ""
    date1904: bool = False


@dataclass
class WorkbookView:
    active_tab: int = 0
    first_sheet: int = 0
    show_horizontal_scroll: bool = False
    show_vertical_scroll: bool = False
    show_sheet_tabs: bool = False
    tab_ratio: int = 0
    window_height: int = 0
    window_width: int = 0
    x_window: str = ""
    y_window: str = ""


@dataclass
class Sheet:
    """A sheet listed in the workbook; ``id`` is its relationship id."""

    name: str = ""
    sheet_id: str = ""
    id: str = ""
    state: str = ""


@dataclass
class DefinedName:
    data: str = ""
    name: str = ""
    comment: str = ""
    custom_menu: str = ""
    description: str = ""
    help: str = ""
    shortcut_key: str = ""
    status_bar: str = ""
    local_sheet_id: int = 0
    function_group_id: int = 0
    function: bool = False
    hidden: bool = False
    vb_procedure: bool = False
    publish_to_server: bool = False
    workbook_parameter: bool = False
    xlm: bool = False


@dataclass
class CalcPr:
    calc_id: str = ""
    iterate_count: int = 0
    ref_mode: str = ""
    iterate: bool = False
    iterate_delta: float = 0.0


def _format_float(value: float) -> str:
    """Shortest round-trip form, using an exponent from 1e+06 upwards or below 1e-04."""
    if value == 0:
        return "0"
    if not math.isfinite(value):
        return "NaN" if math.isnan(value) else ("+Inf" if value > 0 else "-Inf")
    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    prefix = "-" if sign else ""
    point = len(digits) + exponent
    exp10 = point - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = str(digits[0])
        if len(digits) > 1:
            mantissa += "." + "".join(str(d) for d in digits[1:])
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp10):02d}"
    return prefix + format(abs(Decimal(repr(value)).normalize()), "f")


def _attr(name: str, value: Any) -> str:
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, float):
        text = _format_float(value)
    else:
        text = str(value)
    return f' {name}="{_escape(text)}"'


def _omit_empty(pairs: list[tuple[str, Any]]) -> str:
    return "".join(_attr(name, value) for name, value in pairs if value)


@dataclass
class Workbook:
    file_version: FileVersion = field(default_factory=FileVersion)
    workbook_pr: WorkbookPr = field(default_factory=WorkbookPr)
    book_views: list[WorkbookView] = field(default_factory=list)
    sheets: list[Sheet] = field(default_factory=list)
    defined_names: list[DefinedName] = field(default_factory=list)
    calc_pr: CalcPr = field(default_factory=CalcPr)

    def to_xml(self) -> str:
        """Render the workbook element, leaving out attributes with empty values."""
        fv = self.file_version
        pr = self.workbook_pr
        parts = [f'<workbook xmlns="{SPREADSHEET_NS}">']
        parts.append(
            "<fileVersion"
            + _omit_empty(
                [
                    ("appName", fv.app_name),
                    ("lastEdited", fv.last_edited),
                    ("lowestEdited", fv.lowest_edited),
                    ("rupBuild", fv.rup_build),
                ]
            )
            + "></fileVersion>"
        )
        parts.append(
            "<workbookPr"
            + _omit_empty(
                [
                    ("defaultThemeVersion", pr.default_theme_version),
                    ("backupFile", pr.backup_file),
                    ("showObjects", pr.show_objects),
                ]
            )
            + _attr("date1904", pr.date1904)
            + "></workbookPr>"
        )
        parts.append("<workbookProtection></workbookProtection>")
        parts.append("<bookViews>")
        for view in self.book_views:
            parts.append(
                "<workbookView"
                + _omit_empty(
                    [
                        ("activeTab", view.active_tab),
                        ("firstSheet", view.first_sheet),
                        ("showHorizontalScroll", view.show_horizontal_scroll),
                        ("showVerticalScroll", view.show_vertical_scroll),
                        ("showSheetTabs", view.show_sheet_tabs),
                        ("tabRatio", view.tab_ratio),
                        ("windowHeight", view.window_height),
                        ("windowWidth", view.window_width),
                        ("xWindow", view.x_window),
                        ("yWindow", view.y_window),
                    ]
                )
                + "></workbookView>"
            )
        parts.append("</bookViews><sheets>")
        for sheet in self.sheets:
            attrs = _omit_empty([("name", sheet.name), ("sheetId", sheet.sheet_id)])
            if sheet.id:
                attrs += f' xmlns:relationships="{OFFICE_REL_NS}"' + _attr(
                    "relationships:id", sheet.id
                )
            attrs += _omit_empty([("state", sheet.state)])
            parts.append(f"<sheet{attrs}></sheet>")
        parts.append("</sheets><definedNames>")
        for dn in self.defined_names:
            attrs = _attr("name", dn.name) + _omit_empty(
                [
                    ("comment", dn.comment),
                    ("customMenu", dn.custom_menu),
                    ("description", dn.description),
                    ("help", dn.help),
                    ("shortcutKey", dn.shortcut_key),
                    ("statusBar", dn.status_bar),
                    ("localSheetId", dn.local_sheet_id),
                    ("functionGroupId", dn.function_group_id),
                    ("function", dn.function),
                    ("hidden", dn.hidden),
                    ("vbProcedure", dn.vb_procedure),
                    ("publishToServer", dn.publish_to_server),
                    ("workbookParameter", dn.workbook_parameter),
                    ("xml", dn.xlm),
                ]
            )
            parts.append(f"<definedName{attrs}>{_escape(dn.data)}</definedName>")
        parts.append("</definedNames>")
        calc = self.calc_pr
        parts.append(
            "<calcPr"
            + _omit_empty(
                [
                    ("calcId", calc.calc_id),
                    ("iterateCount", calc.iterate_count),
                    ("refMode", calc.ref_mode),
                    ("iterate", calc.iterate),
                    ("iterateDelta", calc.iterate_delta),
                ]
            )
            + "></calcPr>"
        )
        parts.append("</workbook>")
        return "".join(parts)


def _parse_workbook_view(element: ET.Element) -> WorkbookView:
    a = _Attrs(element)
    return WorkbookView(
        active_tab=a.integer("activeTab"),
        first_sheet=a.integer("firstSheet"),
        show_horizontal_scroll=a.boolean("showHorizontalScroll"),
        show_vertical_scroll=a.boolean("showVerticalScroll"),
        show_sheet_tabs=a.boolean("showSheetTabs"),
        tab_ratio=a.integer("tabRatio"),
        window_height=a.integer("windowHeight"),
        window_width=a.integer("windowWidth"),
        x_window=a.text("xWindow"),
        y_window=a.text("yWindow"),
    )


def _parse_sheet(element: ET.Element) -> Sheet:
    a = _Attrs(element)
    return Sheet(
        name=a.text("name"),
        sheet_id=a.text("sheetId"),
        id=element.attrib.get(f"{{{OFFICE_REL_NS}}}id", ""),
        state=a.text("state"),
    )


def _parse_defined_name(element: ET.Element) -> DefinedName:
    a = _Attrs(element)
    return DefinedName(
        data=element.text or "",
        name=a.text("name"),
        comment=a.text("comment"),
        custom_menu=a.text("customMenu"),
        description=a.text("description"),
        help=a.text("help"),
        shortcut_key=a.text("shortcutKey"),
        status_bar=a.text("statusBar"),
        local_sheet_id=a.integer("localSheetId"),
        function_group_id=a.integer("functionGroupId"),
        function=a.boolean("function"),
        hidden=a.boolean("hidden"),
        vb_procedure=a.boolean("vbProcedure"),
        publish_to_server=a.boolean("publishToServer"),
        workbook_parameter=a.boolean("workbookParameter"),
        xlm=a.boolean("xml"),
    )


def _parse_calc_pr(element: ET.Element) -> CalcPr:
    a = _Attrs(element)
    return CalcPr(
        calc_id=a.text("calcId"),
        iterate_count=a.integer("iterateCount"),
        ref_mode=a.text("refMode"),
        iterate=a.boolean("iterate"),
        iterate_delta=a.number("iterateDelta"),
    )


def parse_workbook(source: Source) -> Workbook:
    """Read a workbook part from XML text, bytes or a file object."""
    root = _read_root(source)
    if root.tag != f"{{{SPREADSHEET_NS}}}workbook":
        raise ValueError(f"expected a workbook element, found <{_local(root.tag)}>")
    workbook = Workbook()
    file_version = _child(root, "fileVersion")
    if file_version is not None:
        a = _Attrs(file_version)
        workbook.file_version = FileVersion(
            app_name=a.text("appName"),
            last_edited=a.text("lastEdited"),
            lowest_edited=a.text("lowestEdited"),
            rup_build=a.text("rupBuild"),
        )
    workbook_pr = _child(root, "workbookPr")
    if workbook_pr is not None:
        a = _Attrs(workbook_pr)
        workbook.workbook_pr = WorkbookPr(
            default_theme_version=a.text("defaultThemeVersion"),
            backup_file=a.boolean("backupFile"),
            show_objects=a.text("showObjects"),
            date1904=a.boolean("date1904"),
        )
    for views in _children(root, "bookViews"):
        workbook.book_views = [_parse_workbook_view(v) for v in _children(views, "workbookView")]
    for sheets in _children(root, "sheets"):
        workbook.sheets = [_parse_sheet(s) for s in _children(sheets, "sheet")]
    for names in _children(root, "definedNames"):
        workbook.defined_names = [_parse_defined_name(d) for d in _children(names, "definedName")]
    calc_pr = _child(root, "calcPr")
    if calc_pr is not None:
        workbook.calc_pr = _parse_calc_pr(calc_pr)
    return workbook


def parse_workbook_rels(source: Source) -> list[WorkbookRelation]:
    """Read the workbook's relationships part."""
    root = _read_root(source)
    if root.tag != f"{{{PACKAGE_REL_NS}}}Relationships":
        raise ValueError(f"expected a Relationships element, found <{_local(root.tag)}>")
    return [
        WorkbookRelation(
            id=_Attrs(r).text("Id"),
            target=_Attrs(r).text("Target"),
            type=_Attrs(r).text("Type"),
        )
        for r in _children(root, "Relationship")
    ]


def worksheet_file_for_sheet(
    sheet: Sheet, worksheets: Mapping[str, Any], sheet_xml_map: Mapping[str, str]
) -> Any:
    """Find the worksheet entry for a sheet, or None when there is none.

    The relationship map is consulted first; otherwise the name is ``sheet``
    followed by the sheet id (or the relationship id when that is empty).
    """
    name = sheet_xml_map.get(sheet.id)
    if name is None:
        name = f"sheet{sheet.sheet_id}" if sheet.sheet_id else f"sheet{sheet.id}"
    return worksheets.get(name)


def get_worksheet_from_sheet(
    sheet: Sheet,
    worksheets: Mapping[str, Any],
    sheet_xml_map: Mapping[str, str],
    row_limit: int = NO_ROW_LIMIT,
) -> Worksheet:
    """Load the worksheet a sheet refers to.

    Entries of ``worksheets`` are XML text or bytes, or objects with an
    ``open(mode)`` method such as ``zipfile.Path``. Unless ``row_limit`` is
    ``NO_ROW_LIMIT`` only that many rows are kept.
    """
    entry = worksheet_file_for_sheet(sheet, worksheets, sheet_xml_map)
    if entry is None:
        raise KeyError(f"unable to find sheet {sheet.name!r}")
    if isinstance(entry, (str, bytes)):
        worksheet = parse_worksheet(entry)
    else:
        with entry.open("rb") as handle:
            worksheet = parse_worksheet(handle)
    if row_limit != NO_ROW_LIMIT:
        worksheet.rows = worksheet.rows[: max(row_limit, 0)]
    return worksheet