"""
Distribution report generation.

Creates a 3-tab .xlsx file:
  Tab 1: "Campaign Summary"        — one label/value row per campaign figure
  Tab 2: "Submission Allocations"  — one row per submission (all submissions)
  Tab 3: "Ineligible Submissions"  — submissions dropped by the eligibility filter

File naming: "Payout Distribution {campaign_id}.xlsx"

Formatting:
  - Bold header rows on all tabs
  - Auto-fit column widths (with min/max constraints)
  - Freeze top row (header) on all tabs
  - Currency format for money columns (#,##0.00)
  - Percent format for share columns (0.00%)
  - Comma-separated number format for counts and points (#,##0)
"""

import os
import logging
from decimal import Decimal
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

import config
from models.schemas import DistributionResult, SubmissionResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
MIN_COL_WIDTH = 10      # Minimum column width (characters)
MAX_COL_WIDTH = 60      # Maximum column width (avoid super-wide columns)
HEADER_FONT = Font(bold=True)
CURRENCY_FORMAT = '#,##0.00'
PERCENT_FORMAT = '0.00%'
NUMBER_FORMAT = '#,##0'
POINTS_FORMAT = '#,##0.00'


# ===========================================================================
# Public API
# ===========================================================================

def generate_report(
    result: DistributionResult,
    campaign_title: str = "",
    output_dir: Optional[str] = None,
) -> str:
    """
    Generate the .xlsx distribution report with 3 tabs.

    Args:
        result:         Output of run_distribution
        campaign_title: Shown on the summary tab
        output_dir:     Directory to save the file (defaults to config.OUTPUT_DIR)

    Returns:
        Absolute file path of the generated .xlsx report.
    """
    if output_dir is None:
        output_dir = config.OUTPUT_DIR

    os.makedirs(output_dir, exist_ok=True)

    filename = report_filename(result.campaign_id)
    filepath = os.path.join(output_dir, filename)

    logger.info(f"Generating report: {filepath}")

    wb = Workbook()

    ws1 = wb.active
    ws1.title = "Campaign Summary"
    _build_tab1_campaign_summary(ws1, result, campaign_title)

    ws2 = wb.create_sheet("Submission Allocations")
    _build_tab2_allocations(ws2, result.submissions)

    ws3 = wb.create_sheet("Ineligible Submissions")
    ineligible = [s for s in result.submissions if not s.eligible]
    _build_tab3_ineligible(ws3, ineligible)

    wb.save(filepath)
    logger.info(
        f"Report saved: {filepath} "
        f"({len(result.submissions)} submissions, {len(ineligible)} ineligible, "
        f"outcome={result.outcome.value})"
    )

    return filepath


def report_filename(campaign_id: str) -> str:
    """Filesystem-safe report name for a campaign."""
    safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in campaign_id)
    return f"Payout Distribution {safe_id}.xlsx"


# ===========================================================================
# Tab 1: Campaign Summary
# ===========================================================================

def _build_tab1_campaign_summary(
    ws: Worksheet,
    result: DistributionResult,
    campaign_title: str,
) -> None:
    """
    Tab 1: Label | Value rows.

    Insurance rows (refund / retained / failed checks) are only written when
    the insurance path was taken.
    """
    ws.append(["Field", "Value"])

    total_paid = sum((s.earnings_amount for s in result.submissions), Decimal("0"))

    rows = [
        ("Campaign ID", result.campaign_id, None),
        ("Campaign Title", campaign_title, None),
        ("Outcome", result.outcome.value, None),
        ("Gross Budget", result.gross_budget, CURRENCY_FORMAT),
        ("Commission Amount", result.commission_amount, CURRENCY_FORMAT),
        ("Net Pool", result.net_pool, CURRENCY_FORMAT),
        ("Total Paid to Creators", total_paid, CURRENCY_FORMAT),
        ("Gate Passed", "Yes" if result.gate_passed else "No", None),
        ("Total Submissions", result.total_submissions, NUMBER_FORMAT),
        ("Eligible Submissions", result.eligible_submissions, NUMBER_FORMAT),
        ("Total Points", result.total_points, POINTS_FORMAT),
        ("Total Views", result.total_views, NUMBER_FORMAT),
    ]
    if result.refund_amount is not None:
        rows.append(("Sponsor Refund", result.refund_amount, CURRENCY_FORMAT))
        rows.append(("Platform Retained", result.platform_retained, CURRENCY_FORMAT))
    if result.failed_checks:
        rows.append(("Failed Checks", ", ".join(result.failed_checks), None))

    for label, value, fmt in rows:
        ws.append([label, _cell_value(value)])
        if fmt:
            ws.cell(row=ws.max_row, column=2).number_format = fmt

    _format_header_row(ws)
    _freeze_top_row(ws)
    _auto_fit_columns(ws)


# ===========================================================================
# Tab 2: Submission Allocations
# ===========================================================================

def _build_tab2_allocations(
    ws: Worksheet,
    submissions: list[SubmissionResult],
) -> None:
    """
    Tab 2: One row per submission.

    Sorted by Earnings descending, then Submission ID.
    """
    headers = [
        "Submission ID",
        "Creator ID",
        "Views",
        "Likes",
        "Shares",
        "Points",
        "Eligible",
        "Share %",
        "Earnings",
    ]
    ws.append(headers)

    for s in sorted(submissions, key=_tab2_sort_key):
        ws.append([
            s.submission_id,
            s.creator_id,
            s.views,
            s.likes,
            s.shares,
            _cell_value(s.score),
            "Yes" if s.eligible else "No",
            _cell_value(s.share_percent),
            _cell_value(s.earnings_amount),
        ])

    _format_header_row(ws)
    _freeze_top_row(ws)

    for col_idx in [3, 4, 5]:
        _apply_column_format(ws, col_idx=col_idx, fmt=NUMBER_FORMAT, start_row=2)
    _apply_column_format(ws, col_idx=6, fmt=POINTS_FORMAT, start_row=2)
    _apply_column_format(ws, col_idx=8, fmt=PERCENT_FORMAT, start_row=2)
    _apply_column_format(ws, col_idx=9, fmt=CURRENCY_FORMAT, start_row=2)

    _auto_fit_columns(ws)


def _tab2_sort_key(s: SubmissionResult) -> tuple:
    return (-s.earnings_amount, s.submission_id)


# ===========================================================================
# Tab 3: Ineligible Submissions
# ===========================================================================

def _build_tab3_ineligible(
    ws: Worksheet,
    ineligible: list[SubmissionResult],
) -> None:
    """Tab 3: Submission ID | Creator ID | Points | Reason."""
    ws.append(["Submission ID", "Creator ID", "Points", "Reason"])

    for s in ineligible:
        ws.append([
            s.submission_id,
            s.creator_id,
            _cell_value(s.score),
            s.ineligible_reason,
        ])

    _format_header_row(ws)
    _freeze_top_row(ws)
    _apply_column_format(ws, col_idx=3, fmt=POINTS_FORMAT, start_row=2)
    _auto_fit_columns(ws)


# ===========================================================================
# Formatting helpers
# ===========================================================================

def _cell_value(value):
    """openpyxl has no Decimal cell type; write Decimals as floats."""
    if isinstance(value, Decimal):
        return float(value)
    return value


def _format_header_row(ws: Worksheet) -> None:
    """Bold the entire header row (row 1)."""
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _freeze_top_row(ws: Worksheet) -> None:
    ws.freeze_panes = "A2"


def _apply_column_format(
    ws: Worksheet,
    col_idx: int,
    fmt: str,
    start_row: int = 2,
) -> None:
    """Apply a number format to all non-empty data cells in a 1-based column."""
    for row in range(start_row, ws.max_row + 1):
        cell = ws.cell(row=row, column=col_idx)
        if cell.value is not None:
            cell.number_format = fmt


def _auto_fit_columns(ws: Worksheet) -> None:
    """
    Auto-fit column widths based on cell content.

    Examines header + all data rows to find the widest value in each column,
    then sets the column width with min/max constraints.
    """
    for col_idx in range(1, ws.max_column + 1):
        max_length = 0
        col_letter = get_column_letter(col_idx)

        for row in range(1, ws.max_row + 1):
            cell = ws.cell(row=row, column=col_idx)
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        adjusted_width = max_length + 2
        adjusted_width = max(adjusted_width, MIN_COL_WIDTH)
        adjusted_width = min(adjusted_width, MAX_COL_WIDTH)
        ws.column_dimensions[col_letter].width = adjusted_width
