import io

import pytest

from xlsxml.worksheet import (
    MergeCell,
    MergeCells,
    RelationshipTargetMode,
    RelationshipType,
    WorksheetRelation,
    cell_coords,
    new_worksheet,
    parse_worksheet,
)

SHEET_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main"
           xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">
  <sheetPr filterMode="false">
    <pageSetUpPr fitToPage="false"/>
  </sheetPr>
  <dimension ref="A1:B2"/>
  <sheetViews>
    <sheetView colorId="64" defaultGridColor="true" rightToLeft="false"
               showFormulas="false" showGridLines="true" showOutlineSymbols="true"
               showRowColHeaders="true" showZeros="true" tabSelected="true"
               topLeftCell="A1" view="normal" windowProtection="false"
               workbookViewId="0" zoomScale="100" zoomScaleNormal="100"
               zoomScalePageLayoutView="100">
      <selection activeCell="B2" activeCellId="0" pane="topLeft" sqref="B2"/>
    </sheetView>
  </sheetViews>
  <sheetFormatPr defaultRowHeight="15" defaultColWidth="8">
  </sheetFormatPr>
  <cols>
    <col collapsed="false" hidden="false" max="1025" min="1" style="0"
         width="10.5748987854251"/>
  </cols>
  <sheetData>
    <row collapsed="false" customFormat="false" customHeight="false" hidden="false"
         ht="14.9" outlineLevel="0" r="1">
      <c r="A1" s="1" t="s">
        <v>0</v>
      </c>
      <c r="B1" s="0" t="s">
        <v>1</v>
      </c>
    </row>
    <row collapsed="false" customFormat="false" customHeight="false" hidden="false"
         ht="14.9" outlineLevel="0" r="2">
      <c r="A2" s="0" t="s">
        <v>2</v>
      </c>
      <c r="B2" s="2" t="s">
        <v>3</v>
      </c>
    </row>
  </sheetData>
  <autoFilter ref="A1:Z4" />
  <printOptions headings="false" gridLines="false" gridLinesSet="true"
                horizontalCentered="false" verticalCentered="false"/>
  <pageMargins left="0.7" right="0.7" top="0.7875" bottom="0.7875"
               header="0.511805555555555" footer="0.511805555555555"/>
  <pageSetup blackAndWhite="false" cellComments="none" copies="1" draft="false"
             firstPageNumber="0" fitToHeight="1" fitToWidth="1" horizontalDpi="300"
             orientation="portrait" pageOrder="downThenOver" paperSize="9" scale="100"
             useFirstPageNumber="false" usePrinterDefaults="false" verticalDpi="300"/>
  <headerFooter differentFirst="false" differentOddEven="false">
    <oddHeader>
    </oddHeader>
    <oddFooter>
    </oddFooter>
  </headerFooter>
</worksheet>"""

MERGE_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" xmlns:mc="http://schemas.openxmlformats.org/markup-compatibility/2006">
  <sheetViews>
    <sheetView workbookViewId="0"/>
  </sheetViews>
  <sheetFormatPr customHeight="1" defaultColWidth="17.29" defaultRowHeight="15.0"/>
  <cols>
    <col customWidth="1" min="1" max="6" width="14.43"/>
  </cols>
  <sheetData>
    <row r="1" ht="15.75" customHeight="1">
      <c r="A1" s="1" t="s">
        <v>0</v>
      </c>
    </row>
    <row r="2" ht="15.75" customHeight="1">
      <c r="A2" s="1" t="s">
        <v>1</v>
      </c>
      <c r="B2" s="1" t="s">
        <v>2</v>
      </c>
    </row>
  </sheetData>
  <mergeCells count="1">
    <mergeCell ref="A1:B1"/>
  </mergeCells>
  <drawing r:id="rId1"/>
</worksheet>
"""

NS = 'xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main"'


def test_unmarshal_worksheet():
    worksheet = parse_worksheet(SHEET_XML)
    assert worksheet.dimension == "A1:B2"
    assert len(worksheet.rows) == 2
    assert worksheet.sheet_format_pr.default_row_height == 15.0
    assert worksheet.sheet_format_pr.default_col_width == 8.0
    row = worksheet.rows[0]
    assert row.r == 1
    assert len(row.cells) == 2
    cell = row.cells[0]
    assert cell.r == "A1"
    assert cell.t == "s"
    assert cell.v == "0"
    assert worksheet.auto_filter == "A1:Z4"


def test_unmarshal_worksheet_other_sections():
    worksheet = parse_worksheet(SHEET_XML.encode("utf-8"))
    assert worksheet.cols is not None and worksheet.cols[0].max == 1025
    assert worksheet.cols[0].width == pytest.approx(10.5748987854251)
    assert worksheet.sheet_views[0].selection[0].active_cell == "B2"
    assert worksheet.sheet_views[0].tab_selected is True
    assert worksheet.page_margins.left == 0.7
    assert worksheet.page_set_up.paper_size == "9"
    assert worksheet.page_set_up.horizontal_dpi == 300.0
    assert worksheet.print_options.grid_lines_set is True
    assert worksheet.rows[1].cells[1].s == 2
    assert worksheet.rows[0].ht == "14.9"
    assert worksheet.merge_cells is None
    assert worksheet.hyperlinks is None


def test_unmarshal_worksheet_with_merge_cells():
    worksheet = parse_worksheet(io.BytesIO(MERGE_XML.encode("utf-8")))
    assert worksheet.merge_cells is not None
    assert worksheet.merge_cells.count == 1
    assert worksheet.merge_cells.cells[0].ref == "A1:B1"
    assert worksheet.merge_cells.get_extent("A1") == (1, 0)
    assert worksheet.cols[0].custom_width is True


def test_merge_cells_get_extent():
    mc = MergeCells(count=2)
    cell1 = MergeCell(ref="A11:A12")
    cell2 = MergeCell(ref="A1:C5")
    mc.cells = [cell1, cell2]
    mc.add_cell(cell1)
    mc.add_cell(cell2)
    assert mc.get_extent("A1") == (2, 4)
    assert mc.get_extent("A11") == (0, 1)


def test_merge_cells_unknown_ref_has_no_extent():
    mc = MergeCells()
    mc.add_cell(MergeCell(ref="B2:C3"))
    assert mc.get_extent("Z9") == (0, 0)


def test_merge_cells_bad_range_raises():
    mc = MergeCells()
    mc.add_cell(MergeCell(ref="A1:!!"))
    with pytest.raises(ValueError):
        mc.get_extent("A1")


@pytest.mark.parametrize(
    "ref, expected",
    [("A1", (0, 0)), ("C5", (2, 4)), ("Z1", (25, 0)), ("AA10", (26, 9)), ("b3", (1, 2))],
)
def test_cell_coords(ref, expected):
    assert cell_coords(ref) == expected


@pytest.mark.parametrize("ref", ["", "1A", "A", "A0", "A1B"])
def test_cell_coords_invalid(ref):
    with pytest.raises(ValueError):
        cell_coords(ref)


def test_parse_rejects_wrong_root():
    with pytest.raises(ValueError):
        parse_worksheet(f"<workbook {NS}/>")


def test_parse_rejects_malformed_xml():
    with pytest.raises(ValueError):
        parse_worksheet(f"<worksheet {NS}><sheetData>")


def test_parse_rejects_bad_integer_attribute():
    with pytest.raises(ValueError):
        parse_worksheet(f'<worksheet {NS}><sheetData><row r="x"/></sheetData></worksheet>')


def test_parse_formula_hyperlinks_and_validations():
    xml = (
        f'<worksheet {NS} xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">'
        '<sheetData><row r="1"><c r="A1"><f t="shared" ref="A1:A3" si="2">SUM(B1:B2)</f>'
        "<v>3</v></c></row></sheetData>"
        '<hyperlinks><hyperlink ref="A1" r:id="rId4" display="Home"/></hyperlinks>'
        '<dataValidations count="1"><dataValidation type="list" allowBlank="1" sqref="B1:B5" '
        'prompt="Choose"><formula1>"a,b"</formula1></dataValidation></dataValidations>'
        "</worksheet>"
    )
    worksheet = parse_worksheet(xml)
    formula = worksheet.rows[0].cells[0].f
    assert formula is not None
    assert (formula.content, formula.t, formula.ref, formula.si) == ("SUM(B1:B2)", "shared", "A1:A3", 2)
    assert worksheet.hyperlinks[0].relationship_id == "rId4"
    assert worksheet.hyperlinks[0].display_string == "Home"
    validation = worksheet.data_validations[0]
    assert worksheet.data_validation_count == 1
    assert validation.allow_blank is True
    assert validation.formula1 == '"a,b"'
    assert validation.prompt == "Choose"
    assert validation.error is None


def test_new_worksheet_defaults():
    worksheet = new_worksheet()
    view = worksheet.sheet_views[0]
    assert view.color_id == 64
    assert view.zoom_scale == 100
    assert view.selection[0].sqref == "A1"
    assert worksheet.sheet_pr.fit_to_page == [False]
    assert worksheet.sheet_format_pr.default_row_height == 12.85
    assert worksheet.page_margins.top == 1.05277777777778
    assert worksheet.page_set_up.page_order == "downThenOver"
    assert worksheet.page_set_up.copies == 1
    assert worksheet.header_footer.odd_footer == ['&C&"Times New Roman,Regular"&12Page &P']


def test_map_merge_cells_indexes_ranges():
    worksheet = new_worksheet()
    worksheet.merge_cells = MergeCells(count=1, cells=[MergeCell("D3:G4")])
    worksheet.map_merge_cells()
    assert worksheet.merge_cells.get_extent("D3") == (3, 1)


def test_relationship_values():
    relation = WorksheetRelation(
        id="rId1",
        type=RelationshipType.HYPERLINK.value,
        target="https://example.com/",
        target_mode=RelationshipTargetMode.EXTERNAL.value,
    )
    assert relation.type == RelationshipType.HYPERLINK
    assert relation.target_mode == "External"