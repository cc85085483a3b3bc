"""
ROS Ledger — Public API
=========================
"""

from core.ledger.aggregator import (
    coerce_amount,
    commission_total,
    paid_total,
    record_financials,
    round_half_up,
    sum_field,
)
from core.ledger.payroll import (
    PayrollSummary,
    calculate_payroll_summary,
    daily_rate_for,
    net_payable,
    price_entries,
    salary_for_entry,
)

__all__ = [
    "PayrollSummary",
    "calculate_payroll_summary",
    "coerce_amount",
    "commission_total",
    "daily_rate_for",
    "net_payable",
    "paid_total",
    "price_entries",
    "record_financials",
    "round_half_up",
    "salary_for_entry",
    "sum_field",
]
