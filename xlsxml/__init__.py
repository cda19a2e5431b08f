"""Models for the SpreadsheetML parts of XLSX files: styles, themes, workbooks and worksheets."""

__version__ = "0.1.0"
__all__ = ["style_elements", "stylesheet", "theme", "workbook", "worksheet"]