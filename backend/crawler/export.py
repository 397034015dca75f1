"""
Excel export of crawl results.

Writes enriched items to a single-sheet workbook with fixed column
widths and a wrapped description column.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
import logging

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment
from openpyxl.utils import get_column_letter

from .base import EnrichedItem, ExportError
from .utils import host_slug

logger = logging.getLogger(__name__)

# (header, EnrichedItem attribute, column width)
COLUMNS = [
    ('Title', 'title', 50),
    ('Price', 'price', 15),
    ('List Price', 'list_price', 15),
    ('Image URL', 'image_url', 50),
    ('Product URL', 'detail_url', 70),
    ('Seller', 'seller', 30),
    ('Brand', 'brand', 20),
    ('Description', 'description', 100),
    ('Additional Sellers', 'additional_seller_count', 20),
]

ROW_HEIGHT = 100
SHEET_TITLE = 'Products'
XLSX_MEDIA_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def export_filename(source_url: str, now: Optional[datetime] = None) -> str:
    """
    File name for an export of source_url.

    Examples:
        https://www.takealot.com/all -> products_www_takealot_com_20260101120000.xlsx
    """
    now = now or datetime.now(timezone.utc)
    return f"products_{host_slug(source_url)}_{now.strftime('%Y%m%d%H%M%S')}.xlsx"


def _cell_value(value: str) -> str:
    # openpyxl refuses control characters that sometimes appear in scraped text
    return ILLEGAL_CHARACTERS_RE.sub('', value) if isinstance(value, str) else value


def build_workbook(items: List[EnrichedItem]) -> Workbook:
    """Lay out items in a styled workbook without touching the filesystem."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append([header for header, _, _ in COLUMNS])
    for item in items:
        ws.append([_cell_value(getattr(item, attr)) for _, attr, _ in COLUMNS])

    for index, (_, _, width) in enumerate(COLUMNS, 1):
        ws.column_dimensions[get_column_letter(index)].width = width

    for row in range(1, ws.max_row + 1):
        ws.row_dimensions[row].height = ROW_HEIGHT

    description_column = get_column_letter([attr for _, attr, _ in COLUMNS].index('description') + 1)
    for cell in ws[description_column][1:]:
        cell.alignment = Alignment(wrap_text=True, vertical='top')

    return wb


def export_to_excel(
    items: List[EnrichedItem],
    source_url: str,
    output_dir: Path,
    now: Optional[datetime] = None
) -> Path:
    """
    Save items to an .xlsx file.

    Args:
        items: Enriched items to export
        source_url: Listing URL the items came from (used in the file name)
        output_dir: Directory to write into, created if missing
        now: Timestamp for the file name, defaults to the current UTC time

    Returns:
        Path of the written file

    Raises:
        ExportError: If the workbook cannot be built or saved
    """
    try:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        filepath = output_dir / export_filename(source_url, now)

        wb = build_workbook(items)
        wb.save(filepath)
    except Exception as e:
        logger.error(f"Error exporting to Excel: {e}")
        raise ExportError(f"Failed to create Excel file: {e}") from e

    logger.info(f"Excel file saved successfully: {filepath}")
    return filepath
