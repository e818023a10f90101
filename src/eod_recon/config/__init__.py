"""Configuration module for the reconciliation engine."""

from eod_recon.config.logging import (
    bind_report_context,
    clear_report_context,
    configure_logging,
)
from eod_recon.config.settings import FUND_IN_CATEGORY, Settings, get_settings

__all__ = [
    "FUND_IN_CATEGORY",
    "Settings",
    "get_settings",
    "configure_logging",
    "bind_report_context",
    "clear_report_context",
]
