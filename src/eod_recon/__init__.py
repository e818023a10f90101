"""EOD Recon - daily cash reconciliation and variance engine for retail stores."""

__version__ = "0.1.0"

from eod_recon.config import configure_logging, get_settings
from eod_recon.errors import (
    DuplicateReportError,
    InvalidAmountError,
    InvalidDateError,
    InvalidInputError,
    ReconciliationError,
    ReportLockedError,
)
from eod_recon.models import (
    DailyReport,
    ExpenseLine,
    GeneralExpense,
    ManualSaleLine,
    PosSaleLine,
    PosTransaction,
    ReconciliationStatus,
    ReportInputs,
    Store,
    User,
    UserRole,
)
from eod_recon.periods import (
    AllTime,
    DayPeriod,
    MonthPeriod,
    RangePeriod,
    StoreScope,
    YearPeriod,
    aggregate_period,
    period_from_filter,
    recent_entries,
    split_general_expenses,
    summarize_stores,
)
from eod_recon.reconciliation import (
    classify_status,
    compute_daily_report,
    derive_figures,
    recompute,
)
from eod_recon.records import report_from_record, report_to_record
from eod_recon.rollup import filter_reports, report_row, rollup_totals
from eod_recon.sales import aggregate_sales, merge_pos_transactions
from eod_recon.schemas import parse_general_expense, parse_pos_transaction, parse_report_inputs
from eod_recon.workflow import ReportDraft, amend_daily_report, submit_daily_report

__all__ = [
    # Version
    "__version__",
    # Engine
    "compute_daily_report",
    "derive_figures",
    "recompute",
    "classify_status",
    "aggregate_sales",
    "merge_pos_transactions",
    # Views
    "aggregate_period",
    "period_from_filter",
    "split_general_expenses",
    "recent_entries",
    "summarize_stores",
    "rollup_totals",
    "report_row",
    "filter_reports",
    "StoreScope",
    "DayPeriod",
    "MonthPeriod",
    "YearPeriod",
    "RangePeriod",
    "AllTime",
    # Models
    "DailyReport",
    "ReportInputs",
    "ManualSaleLine",
    "PosSaleLine",
    "PosTransaction",
    "ExpenseLine",
    "GeneralExpense",
    "ReconciliationStatus",
    "Store",
    "User",
    "UserRole",
    # Boundary & storage
    "parse_report_inputs",
    "parse_general_expense",
    "parse_pos_transaction",
    "report_from_record",
    "report_to_record",
    # Workflow
    "ReportDraft",
    "submit_daily_report",
    "amend_daily_report",
    # Errors
    "ReconciliationError",
    "InvalidInputError",
    "InvalidAmountError",
    "InvalidDateError",
    "DuplicateReportError",
    "ReportLockedError",
    # Config
    "get_settings",
    "configure_logging",
]
