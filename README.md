# xlsxml

Plain Python models for the XML parts inside an XLSX package. These are
the style sheet (`xl/styles.xml`), the theme, the workbook and its
relationships, and the worksheets. Every model except the style sheet
can be read from XML. The style sheet and the workbook can be written
out as XML.

The package uses only the standard library.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Style sheets

`xlsxml.stylesheet.StyleSheet` holds fonts, fills, borders, number
formats and cell formats (`Xf` records). Each `add_*` method checks for
an element that is already there. If it finds one, it returns that
element's index, so equal elements are stored once. `add_font` returns
0 and adds nothing for a font without a name.

```python
from xlsxml.stylesheet import StyleSheet
from xlsxml.style_elements import Font, Fill, PatternFill

styles = StyleSheet()
styles.reset()                      # default font, two fills, empty border, xfs

font_id = styles.add_font(Font(name="Calibri", sz="12"))
fill_id = styles.add_fill(Fill(PatternFill(pattern_type="solid")))

fmt = styles.new_num_fmt("yyyy/mm/dd")   # custom formats get ids from 164
print(fmt.num_fmt_id, fmt.format_code)

xml_text = styles.to_xml()               # begins with an XML declaration
```

`new_num_fmt` handles a format code in this order:

- `"general"` (in any case) gives id 0.
- A built-in code gives its built-in id.
- A code that is already registered is returned as it is.
- Any other code is registered under the first free id above 163.

`add_num_fmt` ignores ids up to 163 and ids that are already known.

`StyleSheet.get_style(index)` turns a cell format into a `Style`. The
`Style` holds a `StyleBorder`, a `StyleFill`, a `StyleFont` and a
`StyleAlignment`, together with the apply flags and `named_style_index`.
Results are cached by index.

`argb_value` resolves colours:

- Indexed colours go through `StyleSheet.colors`, which is a `Colors`
  palette.
- Theme colours go through the object passed as `StyleSheet(theme=...)`.
  That object must provide `theme_color(index, tint)`.
- Otherwise the colour's `rgb` is returned.

`StyleSheet.get_number_format(index)` returns the format code string
for a cell format. It gives `"general"` when the index is out of range.
Built-in codes can be looked up with
`xlsxml.style_elements.builtin_number_format(num_fmt_id)`, which returns
`""` for unknown ids.

The element classes live in `xlsxml.style_elements`: `Color`, `Font`,
`PatternFill`, `Fill`, `Line`, `Border`, `Alignment`, `Xf`, `NumFmt`,
`NumFmts`, `Fonts`, `Fills`, `Borders`, `CellStyle`, `CellStyles`,
`CellStyleXfs`, `CellXfs` and `Colors`. They compare with `matches(other)`
and render with `to_xml(...)`.

## Worksheets

```python
from xlsxml.worksheet import parse_worksheet, new_worksheet, cell_coords

sheet = parse_worksheet(xml_bytes)      # str, bytes or a binary/text file object
for row in sheet.rows:
    for cell in row.cells:
        print(cell.r, cell.t, cell.v, cell.inline_text)

if sheet.merge_cells is not None:
    h, v = sheet.merge_cells.get_extent("A1")   # (0, 0) if no merge starts there
```

`parse_worksheet` raises `ValueError` in two cases:

- the XML is malformed;
- the root is not a SpreadsheetML `worksheet`.

It also raises `ValueError` when an attribute cannot be read as the
expected type. Merge ranges are indexed by their top-left cell before
the worksheet is returned.

`new_worksheet()` returns a worksheet with the usual defaults for page
setup, margins, sheet view, print options and header and footer.
`cell_coords("C5")` returns the zero-based `(column, row)`, here `(2, 4)`.
It raises `ValueError` for a malformed reference.

## Workbooks and themes

```python
from xlsxml.workbook import (
    parse_workbook, parse_workbook_rels, get_worksheet_from_sheet, NO_ROW_LIMIT,
)
from xlsxml.theme import parse_theme

workbook = parse_workbook(workbook_xml)
for sheet in workbook.sheets:
    print(sheet.name, sheet.sheet_id, sheet.id, sheet.state)

relations = parse_workbook_rels(rels_xml)       # list of WorkbookRelation
theme = parse_theme(theme_xml)
for entry in theme.clr_scheme.children:
    print(entry.name, entry.srgb_clr, entry.sys_clr)
```

`get_worksheet_from_sheet(sheet, worksheets, sheet_xml_map, row_limit)`
finds and parses the worksheet part for a `Sheet`.

- `worksheets` maps names such as `"sheet1"` to one of:
  - XML text or bytes;
  - an object with an `open(mode)` method, such as `zipfile.Path`.
- `sheet_xml_map` maps relationship ids to those names, and is looked
  up first.
- If `sheet_xml_map` has no entry, the name is `"sheet"` followed by the
  sheet id.
- A `KeyError` is raised when nothing matches.
- With a `row_limit` other than `NO_ROW_LIMIT`, only that many rows are
  kept.

`Workbook.to_xml()` writes the workbook element without an XML
declaration. It leaves out attributes whose value is empty.
`SheetState` lists the sheet states `visible`, `hidden` and `veryHidden`.

## What it does not do

- It does not open or write `.xlsx` archives itself. You read the parts
  out of the zip file, for example with `zipfile`, and hand them in.
- It does not format cell values for display.
- It does not write worksheets back out as XML.
- It does not compute theme colours from a parsed `Theme`. Give
  `StyleSheet` an object with `theme_color` if theme colours should be
  resolved.
- It has no command-line interface.