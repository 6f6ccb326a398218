"""sheet-filter — Keep only the spreadsheet columns you pick."""

__version__ = "0.2.0"

OUTPUT_SHEET_NAME: str = "Filtered Data"

XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
