"""Payroll error hierarchy.

Each error carries the HTTP status it is rendered with; the API layer turns
any ``PayrollError`` into ``{"error": message}``.
"""

from __future__ import annotations

from datetime import date


class PayrollError(Exception):
    """Base exception for payroll calculation failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingParameter(PayrollError):
    """employeeId, startDate or endDate was not supplied."""

    status_code = 400

    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(f"Missing required parameter(s): {', '.join(names)}")


class InvalidParameter(PayrollError):
    """A parameter was supplied but could not be parsed."""

    status_code = 400

    def __init__(self, name: str, value: object) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for {name}: {value!r}")


class InvalidDateRange(PayrollError):
    status_code = 400

    def __init__(self, start_date: date, end_date: date) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"startDate {start_date} is after endDate {end_date}")


class EmployeeNotFound(PayrollError):
    status_code = 404

    def __init__(self, employee_id: str) -> None:
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found")


class MissingUnitPay(PayrollError):
    """Employee exists but has no base unit pay configured."""

    status_code = 400

    def __init__(self, employee_id: str) -> None:
        self.employee_id = employee_id
        super().__init__(f"Unit pay is not set for employee {employee_id}")


class DataSourceError(PayrollError):
    """The backing store read failed or was interrupted."""

    status_code = 500

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Data source failure during {operation}")


class PayrollCalculationFailed(PayrollError):
    """Any unexpected failure while computing payroll."""

    status_code = 500

    def __init__(self) -> None:
        super().__init__("Payroll calculation failed")
