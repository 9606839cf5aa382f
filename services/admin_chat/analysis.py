"""Aggregations behind the admin reports. Pure functions over normalized records."""

import math
from collections import Counter
from datetime import date
from typing import Iterable

from pydantic import BaseModel

from shared.models.records import JobSeekerRecord, PayrollRecord, ProfileRecord

UPCOMING_WINDOW_DAYS = 30
URGENT_WINDOW_DAYS = 2
TOP_N = 5

# (label, lower, upper), bounds inclusive on the rounded completion
COMPLETION_BANDS: list[tuple[str, int, int]] = [
    ("0-25%", 0, 25),
    ("26-50%", 26, 50),
    ("51-75%", 51, 75),
    ("76-99%", 76, 99),
]


def round_half_up(value: float) -> int:
    """Round like a person would: 2.5 -> 3 (Python's round() gives 2)."""
    return int(math.floor(value + 0.5))


def percentage(count: int, total: int) -> int:
    return round_half_up(count / max(total, 1) * 100)


class Share(BaseModel):
    name: str
    count: int
    percentage: int


def _shares(values: Iterable[str], total: int, top: int | None = None) -> list[Share]:
    # Counter.most_common keeps first-seen order for equal counts
    return [Share(name=name, count=count, percentage=percentage(count, total)) for name, count in Counter(values).most_common(top)]


##########################################
################ PAYROLL #################
##########################################


class PaymentDue(BaseModel):
    record: PayrollRecord
    days_until: int


class PayrollAnalysis(BaseModel):
    total: int
    upcoming: list[PaymentDue]
    overdue: list[PayrollRecord]
    urgent: list[PaymentDue]
    total_amount: float

    @property
    def urgent_count(self) -> int:
        return len(self.urgent)


def analyze_payroll(records: list[PayrollRecord], today: date | None = None) -> PayrollAnalysis:
    """Split payroll records by due date.

    upcoming: pending, due in 0..30 days, soonest first.
    overdue: pending with a due date before today.
    urgent: the upcoming ones due in at most 2 days.
    Records without a due date count towards the total and the amount only.
    """
    today = today or date.today()
    upcoming: list[PaymentDue] = []
    overdue: list[PayrollRecord] = []
    for record in records:
        if not record.is_pending() or record.due_date is None:
            continue
        days_until = (record.due_date - today).days
        if days_until < 0:
            overdue.append(record)
        elif days_until <= UPCOMING_WINDOW_DAYS:
            upcoming.append(PaymentDue(record=record, days_until=days_until))
    upcoming.sort(key=lambda p: p.days_until)

    return PayrollAnalysis(
        total=len(records),
        upcoming=upcoming,
        overdue=overdue,
        urgent=[p for p in upcoming if p.days_until <= URGENT_WINDOW_DAYS],
        total_amount=sum(r.amount for r in records),
    )


##########################################
############### JOB SEEKERS ##############
##########################################


class JobSeekerAnalysis(BaseModel):
    total: int
    active: int
    inactive: int
    completion: int
    locations: list[Share]
    categories: list[Share]

    @property
    def incomplete_estimate(self) -> int:
        """Users still to complete their profile, estimated from the average completion."""
        return self.total - math.floor(self.total * self.completion / 100)


def analyze_job_seekers(records: list[JobSeekerRecord]) -> JobSeekerAnalysis:
    total = len(records)
    active = sum(1 for r in records if r.is_active)
    return JobSeekerAnalysis(
        total=total,
        active=active,
        inactive=total - active,
        completion=round_half_up(sum(r.completion for r in records) / max(total, 1)),
        locations=_shares((r.location for r in records), total),
        categories=_shares((r.category for r in records), total),
    )


def job_seeker_insight(analysis: JobSeekerAnalysis) -> str:
    """The first applicable of: low completion, one dominant location, large user base, generic engagement."""
    if analysis.completion < 50:
        return f"Low completion rate ({analysis.completion}%) - consider sending reminders"
    if analysis.locations and analysis.locations[0].percentage > 60:
        top = analysis.locations[0]
        return f"{top.name} dominates ({top.percentage}%) - consider expanding to other regions"
    if analysis.total > 1000:
        return f"Large user base ({analysis.total}) - platform is growing well"
    return f"Active user engagement across {len(analysis.locations)} locations"


##########################################
################ PROFILES ################
##########################################


class ProfileAnalysis(BaseModel):
    total: int
    average_completion: int
    bands: list[Share]
    locations: list[Share]
    missing_fields: list[Share]


def completion_bands(records: list[ProfileRecord]) -> list[Share]:
    total = len(records)
    rounded = [round_half_up(r.completion) for r in records]
    return [
        Share(name=label, count=count, percentage=percentage(count, total))
        for label, lower, upper in COMPLETION_BANDS
        for count in [sum(1 for c in rounded if lower <= c <= upper)]
    ]


def analyze_profiles(records: list[ProfileRecord]) -> ProfileAnalysis:
    total = len(records)
    return ProfileAnalysis(
        total=total,
        average_completion=round_half_up(sum(r.completion for r in records) / max(total, 1)),
        bands=completion_bands(records),
        locations=_shares((r.location for r in records), total, top=TOP_N),
        missing_fields=_shares((field for r in records for field in r.missing_fields), total, top=TOP_N),
    )
