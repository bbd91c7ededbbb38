from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class EmployeePayProfile:
    employee_id: str
    name: str
    unit_pay: Optional[int]
    hourly_overtime_pay: Optional[int] = None


@dataclass
class SiteAssignment:
    """One site-date the employee was assigned to."""

    site_date_id: str
    work_date: date
    site_name: str
    unit_pay_condition: Optional[str] = None


@dataclass
class AssignmentDetail:
    work_date: date
    site_name: str
    unit_pay_condition: str
    effective_unit_pay: int


@dataclass
class AssignmentAggregate:
    count: int = 0
    total_pay: int = 0
    details: List[AssignmentDetail] = field(default_factory=list)

    def add(self, detail: AssignmentDetail) -> None:
        self.details.append(detail)
        self.count += 1
        self.total_pay += detail.effective_unit_pay


@dataclass
class PayrollReport:
    employee_id: str
    employee_name: str
    unit_pay: int
    hourly_overtime_pay: int
    total_assignments: int
    base_salary: int
    overtime_hours: int
    overtime_pay: int
    total_salary: int
    assignment_details: List[AssignmentDetail]
