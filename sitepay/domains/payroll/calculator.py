from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Tuple, Union

from sitepay.core.logging import get_logger
from sitepay.core.observability import get_meter, get_tracer

from .exceptions import (
    EmployeeNotFound,
    InvalidDateRange,
    InvalidParameter,
    MissingParameter,
    MissingUnitPay,
)
from .models import (
    AssignmentAggregate,
    AssignmentDetail,
    EmployeePayProfile,
    PayrollReport,
)
from .pay_conditions import normalize_condition, resolve_effective_pay
from .repository import AssignmentQuery

logger = get_logger(__name__)
tracer = get_tracer(__name__)
calculations_counter = get_meter(__name__).create_counter(
    "payroll.calculations", description="Payroll calculations by outcome"
)

DateInput = Union[date, datetime, str, None]


def parse_date(name: str, value: DateInput) -> date:
    """Accept a date, a datetime, ``YYYY-MM-DD`` or an ISO-8601 timestamp."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as exc:
        raise InvalidParameter(name, value) from exc


def validate_request(
    employee_id: Optional[str], start_date: DateInput, end_date: DateInput
) -> Tuple[str, date, date]:
    supplied = {"employeeId": employee_id, "startDate": start_date, "endDate": end_date}
    missing = [
        name
        for name, value in supplied.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise MissingParameter(missing)

    start = parse_date("startDate", start_date)
    end = parse_date("endDate", end_date)
    if start > end:
        raise InvalidDateRange(start, end)
    return str(employee_id).strip(), start, end


class PayrollCalculator:
    """Unit-pay payroll for one employee over an inclusive date range."""

    def __init__(self, repository: AssignmentQuery):
        self.repository = repository

    def load_employee(self, employee_id: str) -> EmployeePayProfile:
        employee = self.repository.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFound(employee_id)
        if employee.unit_pay is None:
            raise MissingUnitPay(employee_id)
        return employee

    def _aggregate(self, employee: EmployeePayProfile, start: date, end: date) -> AssignmentAggregate:
        aggregate = AssignmentAggregate()
        for assignment in self.repository.find_assignments(employee.employee_id, start, end):
            aggregate.add(
                AssignmentDetail(
                    work_date=assignment.work_date,
                    site_name=assignment.site_name,
                    unit_pay_condition=normalize_condition(assignment.unit_pay_condition),
                    effective_unit_pay=resolve_effective_pay(
                        employee.unit_pay, assignment.unit_pay_condition
                    ),
                )
            )
        return aggregate

    def _run(
        self, employee_id: Optional[str], start_date: DateInput, end_date: DateInput
    ) -> Tuple[EmployeePayProfile, AssignmentAggregate, date, date]:
        employee_id, start, end = validate_request(employee_id, start_date, end_date)
        employee = self.load_employee(employee_id)
        return employee, self._aggregate(employee, start, end), start, end

    def aggregate_assignments(
        self, employee_id: Optional[str], start_date: DateInput, end_date: DateInput
    ) -> AssignmentAggregate:
        _, aggregate, _, _ = self._run(employee_id, start_date, end_date)
        return aggregate

    @staticmethod
    def build_report(employee: EmployeePayProfile, aggregate: AssignmentAggregate) -> PayrollReport:
        # overtime is not computed yet; the fields stay in the report as zeros
        overtime_hours = 0
        overtime_pay = 0
        base_salary = aggregate.total_pay
        return PayrollReport(
            employee_id=employee.employee_id,
            employee_name=employee.name,
            unit_pay=employee.unit_pay or 0,
            hourly_overtime_pay=employee.hourly_overtime_pay or 0,
            total_assignments=aggregate.count,
            base_salary=base_salary,
            overtime_hours=overtime_hours,
            overtime_pay=overtime_pay,
            total_salary=base_salary + overtime_pay,
            assignment_details=list(aggregate.details),
        )

    def calculate(
        self, employee_id: Optional[str], start_date: DateInput, end_date: DateInput
    ) -> PayrollReport:
        with tracer.start_as_current_span("payroll.calculate") as span:
            try:
                employee, aggregate, start, end = self._run(employee_id, start_date, end_date)
            except Exception as exc:
                calculations_counter.add(1, {"outcome": type(exc).__name__})
                raise
            span.set_attribute("payroll.employee_id", employee.employee_id)
            report = self.build_report(employee, aggregate)
            calculations_counter.add(1, {"outcome": "ok"})
            logger.info(
                "payroll_calculated",
                employee_id=employee.employee_id,
                start_date=start.isoformat(),
                end_date=end.isoformat(),
                total_assignments=report.total_assignments,
                total_salary=report.total_salary,
            )
            return report
