"""
ROS Ledger — Payroll Summary
==============================
Timesheet aggregation for worker-style records.

    dailyRate   = basicSalary / 30
    netPayable  = round(totalEarned − totalAdvances)   (half-up)

Per-entry earnings:
1. a manual daily amount, when enabled, wins outright
2. emergency duty earns the (half-)day rate plus the emergency add-on
3. any status other than "present" earns nothing
4. a half day earns half the rate
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from core.ledger.aggregator import coerce_amount, round_half_up, sum_field

DAYS_PER_MONTH = 30

STATUS_PRESENT = "present"
STATUS_LEAVE = "leave"
STATUS_ABSENT = "absent"
STATUS_HOLIDAY = "holiday"

_EMERGENCY_FIELDS = ("emergencyAmount", "emergencySalary", "emergencyPay")


@dataclass(frozen=True)
class PayrollSummary:
    working_days: float
    full_days: int
    half_days: int
    leaves: int
    holidays: int
    emergencies: int
    absents: int
    total_days: int
    total_salary: float
    advances_total: float
    net_payable: int

    def to_dict(self) -> dict:
        return {
            "workingDays": self.working_days,
            "fullDays": self.full_days,
            "halfDays": self.half_days,
            "leaves": self.leaves,
            "holidays": self.holidays,
            "emergencies": self.emergencies,
            "absents": self.absents,
            "totalDays": self.total_days,
            "totalSalary": self.total_salary,
            "advancesTotal": self.advances_total,
            "netPayable": self.net_payable,
        }


def daily_rate_for(basic_salary: Any) -> float:
    return coerce_amount(basic_salary) / DAYS_PER_MONTH


def emergency_amount(entry: Mapping[str, Any]) -> float:
    for name in _EMERGENCY_FIELDS:
        if entry.get(name) is not None:
            return coerce_amount(entry.get(name))
    return 0.0


def salary_for_entry(basic_salary: Any, entry: Mapping[str, Any]) -> float:
    if entry.get("manualDailyEnabled") and entry.get("manualDailyAmount"):
        return coerce_amount(entry.get("manualDailyAmount"))

    # A per-entry edited basic salary overrides the worker's.
    basic = coerce_amount(entry.get("editedBasicSalary")) or coerce_amount(basic_salary)
    rate = basic / DAYS_PER_MONTH
    is_half = bool(entry.get("isHalfDay"))

    if entry.get("isEmergency"):
        base = rate / 2 if is_half else rate
        return base + emergency_amount(entry)

    status = str(entry.get("status") or STATUS_PRESENT).lower()
    if status != STATUS_PRESENT:
        return 0.0
    return rate / 2 if is_half else rate


def _is_working(entry: Mapping[str, Any]) -> bool:
    return entry.get("status") == STATUS_PRESENT and not entry.get("isPublicHoliday")


def calculate_payroll_summary(
    entries: Iterable[Mapping[str, Any]],
    advances: Any = None,
    *,
    salary_field: str = "dailySalary",
) -> PayrollSummary:
    """Summarize a timesheet. `advances` may be a list or an id → advance mapping."""
    rows: List[Mapping[str, Any]] = list(entries)
    full_days = sum(1 for e in rows if _is_working(e) and not e.get("isHalfDay"))
    half_days = sum(1 for e in rows if _is_working(e) and e.get("isHalfDay"))
    total_salary = sum_field(rows, salary_field)
    advances_total = sum_field(advances, "amount")

    return PayrollSummary(
        working_days=full_days + half_days * 0.5,
        full_days=full_days,
        half_days=half_days,
        leaves=sum(1 for e in rows if e.get("status") == STATUS_LEAVE),
        holidays=sum(
            1 for e in rows
            if e.get("isPublicHoliday") or e.get("status") == STATUS_HOLIDAY
        ),
        emergencies=sum(1 for e in rows if e.get("isEmergency")),
        absents=sum(1 for e in rows if e.get("status") == STATUS_ABSENT),
        total_days=len(rows),
        total_salary=total_salary,
        advances_total=advances_total,
        net_payable=round_half_up(total_salary - advances_total),
    )


def price_entries(
    basic_salary: Any, entries: Iterable[Mapping[str, Any]],
    *, salary_field: str = "dailySalary",
) -> List[dict]:
    """Copy entries with `salary_field` filled from salary_for_entry()."""
    priced = []
    for entry in entries:
        row = dict(entry)
        row[salary_field] = salary_for_entry(basic_salary, entry)
        priced.append(row)
    return priced


def net_payable(total_earned: Any, total_advances: Optional[Any] = None) -> int:
    return round_half_up(coerce_amount(total_earned) - coerce_amount(total_advances))
