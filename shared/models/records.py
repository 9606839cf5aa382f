"""Canonical records built from the heterogeneous HR platform payloads.

The remote API names the same field differently depending on the endpoint and
its version. Every ``from_raw`` below documents its precedence: the first key
holding a non-empty value wins, otherwise the default is used.
"""

from datetime import date
from typing import Any, Iterable

from pydantic import BaseModel, Field

from shared.exceptions import DataShapeError


def _first(raw: dict, keys: Iterable[str], default: Any = None) -> Any:
    for key in keys:
        val = raw.get(key)
        if val is not None and val != "":
            return val
    return default


def _as_float(val: Any, default: float = 0.0) -> float:
    if isinstance(val, bool):
        return default
    if isinstance(val, (int, float)):
        return float(val)
    if isinstance(val, str):
        try:
            return float(val.strip().rstrip("%").replace(",", ""))
        except ValueError:
            return default
    return default


def _as_str(val: Any) -> str | None:
    if val is None or isinstance(val, (dict, list)):
        return None
    return str(val).strip() or None


def _as_date(val: Any) -> date | None:
    if isinstance(val, date):
        return val
    if isinstance(val, str) and len(val) >= 10:
        try:
            return date.fromisoformat(val[:10])
        except ValueError:
            return None
    return None


def _as_list(val: Any) -> list[str]:
    if isinstance(val, list):
        return [str(v).strip() for v in val if str(v).strip()]
    if isinstance(val, str):
        return [v.strip() for v in val.split(",") if v.strip()]
    return []


def _require_dict(raw: Any, kind: str) -> dict:
    if not isinstance(raw, dict):
        raise DataShapeError(f"Expected a {kind} object, got {type(raw).__name__}")
    return raw


class PayrollRecord(BaseModel):
    id: str | None = None
    employee_name: str | None = None
    period: str = "N/A"
    amount: float = 0.0
    due_date: date | None = None
    status: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "PayrollRecord":
        """Normalize a raw payroll entry.

        Precedence:
            period: payment_period, period, month
            amount: amount, total_amount, net_salary (default 0)
            due_date: due_date, payment_date, dueDate (ISO date prefix)
            status: status, lowercased
        """
        raw = _require_dict(raw, "payroll")
        rec_id = _first(raw, ("id", "payroll_id"))
        return cls(
            id=str(rec_id) if rec_id is not None else None,
            employee_name=_as_str(_first(raw, ("employee_name", "full_name", "name"))),
            period=_as_str(_first(raw, ("payment_period", "period", "month"))) or "N/A",
            amount=_as_float(_first(raw, ("amount", "total_amount", "net_salary"))),
            due_date=_as_date(_first(raw, ("due_date", "payment_date", "dueDate"))),
            status=str(raw.get("status") or "").strip().lower(),
        )

    def is_pending(self) -> bool:
        return self.status == "pending"


class JobSeekerRecord(BaseModel):
    id: str | None = None
    full_name: str | None = None
    email: str | None = None
    location: str = "Unknown"
    category: str = "Uncategorized"
    completion: float = 0.0
    is_active: bool = False

    @classmethod
    def from_raw(cls, raw: Any) -> "JobSeekerRecord":
        """Normalize a raw job seeker.

        Precedence:
            completion: profile_completion, completion_percentage, profile_completion_percentage (default 0)
            location: location, district, province, address (default "Unknown")
            category: job_category, category, category_name (default "Uncategorized")
            is_active: status == "active" or a truthy is_active
        """
        raw = _require_dict(raw, "job seeker")
        rec_id = _first(raw, ("id", "users_id", "user_id"))
        return cls(
            id=str(rec_id) if rec_id is not None else None,
            full_name=_as_str(_first(raw, ("full_name", "name"))),
            email=_as_str(_first(raw, ("email",))),
            location=_as_str(_first(raw, ("location", "district", "province", "address"))) or "Unknown",
            category=_as_str(_first(raw, ("job_category", "category", "category_name"))) or "Uncategorized",
            completion=_as_float(_first(raw, ("profile_completion", "completion_percentage", "profile_completion_percentage"))),
            is_active=raw.get("status") == "active" or bool(raw.get("is_active")),
        )


class ProfileRecord(BaseModel):
    id: str | None = None
    email: str | None = None
    full_name: str = "there"
    location: str = "Unknown"
    completion: float = 0.0
    missing_fields: list[str] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> "ProfileRecord":
        """Normalize a raw incomplete-profile entry.

        Precedence:
            full_name: full_name, name (default "there", used in greetings)
            completion: completion_percentage, profile_completion, profile_completion_percentage (default 0)
            location: location, district, province, address (default "Unknown")
            missing_fields: missing_fields, missingFields (list or comma separated string)
        """
        raw = _require_dict(raw, "profile")
        rec_id = _first(raw, ("id", "users_id", "user_id"))
        return cls(
            id=str(rec_id) if rec_id is not None else None,
            email=_as_str(_first(raw, ("email",))),
            full_name=_as_str(_first(raw, ("full_name", "name"))) or "there",
            location=_as_str(_first(raw, ("location", "district", "province", "address"))) or "Unknown",
            completion=_as_float(_first(raw, ("completion_percentage", "profile_completion", "profile_completion_percentage"))),
            missing_fields=_as_list(_first(raw, ("missing_fields", "missingFields"), [])),
        )


class JobRecord(BaseModel):
    id: str | None = None
    title: str = "Untitled"
    category: str = "Uncategorized"
    location: str = "Unknown"
    status: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "JobRecord":
        """Normalize a raw job posting.

        Precedence:
            title: job_title, title, name
            category: job_category, category, category_name
            location: location, district, province
        """
        raw = _require_dict(raw, "job")
        rec_id = _first(raw, ("id", "job_id"))
        return cls(
            id=str(rec_id) if rec_id is not None else None,
            title=_as_str(_first(raw, ("job_title", "title", "name"))) or "Untitled",
            category=_as_str(_first(raw, ("job_category", "category", "category_name"))) or "Uncategorized",
            location=_as_str(_first(raw, ("location", "district", "province"))) or "Unknown",
            status=str(raw.get("status") or "").strip().lower(),
        )
