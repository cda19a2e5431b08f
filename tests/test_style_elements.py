import pytest

from xlsxml.style_elements import (
    BUILTIN_NUM_FMTS_INV,
    Alignment,
    Border,
    Borders,
    CellStyle,
    CellStyles,
    CellStyleXfs,
    CellXfs,
    Color,
    Colors,
    Fill,
    Fills,
    Font,
    Fonts,
    Line,
    NumFmt,
    NumFmts,
    PatternFill,
    Xf,
    builtin_number_format,
)


def _xf_all_applied(apply_number_format):
    return Xf(
        apply_alignment=True,
        apply_border=True,
        apply_font=True,
        apply_fill=True,
        apply_number_format=apply_number_format,
        apply_protection=True,
        alignment=Alignment(
            horizontal="left",
            indent=1,
            shrink_to_fit=True,
            text_rotation=0,
            vertical="middle",
            wrap_text=False,
        ),
    )


def test_fonts_xml_with_one_font():
    fonts = Fonts()
    fonts.add(Font(sz="10", name="Andale Mono", b="", i="", u=""))
    font_map = {}
    assert fonts.to_xml(font_map) == (
        '<fonts count="1"><font><sz val="10"/><name val="Andale Mono"/>'
        "<b/><i/><u/></font></fonts>"
    )
    assert font_map == {0: 0}


def test_font_xml_with_theme_colour_and_scheme():
    font = Font(sz="11", name="Arial", family="2", color=Color(theme=1), scheme="minor")
    assert font.to_xml() == (
        '<font><sz val="11"/><name val="Arial"/><family val="2"/>'
        '<color theme="1" /><scheme val="minor"/></font>'
    )


def test_empty_fonts_give_no_xml():
    assert Fonts().to_xml({}) == ""


def test_fills_xml_with_one_fill():
    fills = Fills()
    fills.add(
        Fill(
            PatternFill(
                pattern_type="solid",
                fg_color=Color(rgb="#FFFFFF"),
                bg_color=Color(rgb="#000000"),
            )
        )
    )
    fill_map = {}
    assert fills.to_xml(fill_map) == (
        '<fills count="1"><fill><patternFill patternType="solid">'
        '<fgColor rgb="#FFFFFF"/><bgColor rgb="#000000"/></patternFill></fill></fills>'
    )
    assert fill_map == {0: 0}


def test_fills_skip_empty_fill_and_remap():
    fills = Fills()
    fills.add(Fill())
    fills.add(Fill(PatternFill(pattern_type="none")))
    fill_map = {}
    assert fills.to_xml(fill_map) == (
        '<fills count="1"><fill><patternFill patternType="none"/></fill></fills>'
    )
    assert fill_map == {1: 0}


def test_borders_xml_with_one_border():
    borders = Borders()
    borders.add(Border(left=Line(style="solid")))
    border_map = {}
    assert borders.to_xml(border_map) == (
        '<borders count="1"><border><left style="solid"></left>'
        "<right/><top/><bottom/></border></borders>"
    )
    assert border_map == {0: 0}


def test_border_line_with_colour():
    border = Border(top=Line(style="thin", color=Color(rgb="FF00FF00")))
    assert border.to_xml() == (
        '<border><left/><right/><top style="thin"><color rgb="FF00FF00"/></top>'
        "<bottom/></border>"
    )


def test_cell_style_xfs_xml():
    xfs = CellStyleXfs()
    xfs.add(_xf_all_applied(False))
    assert xfs.to_xml({}, {}, {}) == (
        '<cellStyleXfs count="1"><xf applyAlignment="1" applyBorder="1" '
        'applyFont="1" applyFill="1" applyNumberFormat="0" applyProtection="1" '
        'borderId="0" fillId="0" fontId="0" numFmtId="0"><alignment '
        'horizontal="left" indent="1" shrinkToFit="1" textRotation="0" '
        'vertical="middle" wrapText="0"/></xf></cellStyleXfs>'
    )


def test_cell_xfs_xml():
    xfs = CellXfs()
    xfs.add(_xf_all_applied(True))
    assert xfs.to_xml({}, {}, {}) == (
        '<cellXfs count="1"><xf applyAlignment="1" applyBorder="1" '
        'applyFont="1" applyFill="1" applyNumberFormat="1" applyProtection="1" '
        'borderId="0" fillId="0" fontId="0" numFmtId="0"><alignment '
        'horizontal="left" indent="1" shrinkToFit="1" textRotation="0" '
        'vertical="middle" wrapText="0"/></xf></cellXfs>'
    )


def test_xf_remaps_ids_and_writes_xf_id():
    xf = Xf(border_id=3, fill_id=2, font_id=5, num_fmt_id=164, xf_id=0)
    xml = xf.to_xml({3: 1}, {2: 0}, {5: 2})
    assert xml.startswith(
        '<xf applyAlignment="0" applyBorder="0" applyFont="0" applyFill="0" '
        'applyNumberFormat="0" applyProtection="0" borderId="1" fillId="0" '
        'fontId="2" numFmtId="164" xfId="0">'
    )
    assert xml.endswith("</xf>")


def test_alignment_defaults_in_xml():
    assert Alignment().to_xml() == (
        '<alignment horizontal="general" indent="0" shrinkToFit="0" '
        'textRotation="0" vertical="bottom" wrapText="0"/>'
    )


def test_cell_styles_xml():
    styles = CellStyles(count=1, cell_style=[CellStyle(name="Bob", builtin_id=31, xf_id=0)])
    assert styles.to_xml() == (
        '<cellStyles count="1"><cellStyle builtInId="31" name="Bob" xfId="0">'
        "</cellStyle></cellStyles>"
    )


def test_cell_style_boolean_attributes():
    style = CellStyle(name="A&B", xf_id=2, hidden=True)
    assert style.to_xml() == '<cellStyle hidden="true" name="A&amp;B" xfId="2"></cellStyle>'


def test_num_fmts_xml():
    num_fmts = NumFmts(count=1, num_fmt=[NumFmt(164, "GENERAL")])
    assert num_fmts.to_xml() == (
        '<numFmts count="1"><numFmt numFmtId="164" formatCode="GENERAL"/></numFmts>'
    )


def test_num_fmts_without_count_is_empty():
    assert NumFmts(count=0, num_fmt=[NumFmt(164, "0")]).to_xml() == ""


def test_num_fmt_escapes_format_code():
    assert NumFmt(165, '0" <x>"&').to_xml() == (
        '<numFmt numFmtId="165" formatCode="0&#34; &lt;x&gt;&#34;&amp;"/>'
    )


def test_font_matches():
    def make():
        return Font(
            sz="11",
            color=Color(rgb="FFFF0000"),
            name="Calibri",
            family="2",
            b="",
            i="",
            u="",
        )

    font_a, font_b = make(), make()
    assert font_a.matches(font_b) is True
    for attr, value in (
        ("sz", "12"),
        ("name", "Arial"),
        ("family", "1"),
        ("b", None),
        ("i", None),
        ("u", None),
    ):
        other = make()
        setattr(other, attr, value)
        assert font_a.matches(other) is False
    other = make()
    other.color.rgb = "12345678"
    assert font_a.matches(other) is False


def test_fill_matches():
    def make():
        return Fill(
            PatternFill(
                pattern_type="solid",
                fg_color=Color(rgb="FFFF0000"),
                bg_color=Color(rgb="0000FFFF"),
            )
        )

    fill_a, fill_b = make(), make()
    assert fill_a.matches(fill_b) is True
    fill_b.pattern_fill.pattern_type = "gray125"
    assert fill_a.matches(fill_b) is False
    fill_b.pattern_fill.pattern_type = "solid"
    fill_b.pattern_fill.fg_color.rgb = "00FF00FF"
    assert fill_a.matches(fill_b) is False
    fill_b.pattern_fill.fg_color.rgb = "FFFF0000"
    fill_b.pattern_fill.bg_color.rgb = "12456789"
    assert fill_a.matches(fill_b) is False
    fill_b.pattern_fill.bg_color.rgb = "0000FFFF"
    assert fill_a.matches(fill_b) is True


@pytest.mark.parametrize("side", ["left", "right", "top", "bottom"])
def test_border_matches(side):
    def make():
        return Border(*(Line(style="none") for _ in range(4)))

    border_a, border_b = make(), make()
    assert border_a.matches(border_b) is True
    getattr(border_b, side).style = "thin"
    assert border_a.matches(border_b) is False


def test_xf_matches():
    def make():
        return Xf(
            apply_alignment=True,
            apply_border=True,
            apply_font=True,
            apply_fill=True,
            apply_protection=True,
        )

    xf_a = make()
    assert xf_a.matches(make()) is True
    for attr, value in (
        ("apply_alignment", False),
        ("apply_border", False),
        ("apply_font", False),
        ("apply_fill", False),
        ("apply_protection", False),
        ("border_id", 1),
        ("fill_id", 1),
        ("font_id", 1),
        ("num_fmt_id", 1),
    ):
        other = make()
        setattr(other, attr, value)
        assert xf_a.matches(other) is False

    xf_b = make()
    xf_a.xf_id = 1
    assert xf_a.matches(xf_b) is False
    xf_b.xf_id = 1
    assert xf_a.matches(xf_b) is True
    xf_b.xf_id = 2
    assert xf_a.matches(xf_b) is False


def test_xf_matches_ignores_apply_number_format():
    assert Xf(apply_number_format=True).matches(Xf()) is True


def test_colors_indexed_color():
    colors = Colors(indexed_colors=["FF000000", "FFFFFFFF"])
    assert colors.indexed_color(2, 0.0) == "FFFFFFFF"
    assert colors.indexed_color(1, 0.5) == "FF000000"
    with pytest.raises(IndexError):
        colors.indexed_color(0, 0.0)
    with pytest.raises(IndexError):
        colors.indexed_color(3, 0.0)


def test_builtin_number_format():
    assert builtin_number_format(14) == "mm-dd-yy"
    assert builtin_number_format(49) == "@"
    assert builtin_number_format(0) == "general"
    assert builtin_number_format(100) == ""


def test_builtin_inverse_table_round_trips():
    assert BUILTIN_NUM_FMTS_INV["0.00e+00"] == 11
    assert BUILTIN_NUM_FMTS_INV["mm-dd-yy"] == 14
    assert "hh:mm:ss" not in BUILTIN_NUM_FMTS_INV
    for code, num_fmt_id in BUILTIN_NUM_FMTS_INV.items():
        assert builtin_number_format(num_fmt_id) == code