from __future__ import annotations

from datetime import date
from typing import List, NoReturn, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sitepay.core.logging import get_logger
from sitepay.core.monitoring import capture_data_source_failure
from sitepay.models import Employee, Site, SiteDate, SiteDateEmployee

from .exceptions import DataSourceError
from .models import EmployeePayProfile, SiteAssignment

logger = get_logger(__name__)


class AssignmentQuery(Protocol):
    """Read-only access to employees and their site-date assignments."""

    def get_employee(self, employee_id: str) -> Optional[EmployeePayProfile]: ...

    def find_assignments(
        self, employee_id: str, start_date: date, end_date: date
    ) -> List[SiteAssignment]: ...


class SqlAssignmentRepository:
    """AssignmentQuery backed by the ORM session.

    When ``registrar_id`` is given every lookup is restricted to rows owned by
    that registrar.
    """

    def __init__(self, session: Session, registrar_id: Optional[str] = None) -> None:
        self.session = session
        self.registrar_id = registrar_id

    def get_employee(self, employee_id: str) -> Optional[EmployeePayProfile]:
        query = self.session.query(Employee).filter(Employee.id == employee_id)
        if self.registrar_id is not None:
            query = query.filter(Employee.registrar_id == self.registrar_id)
        try:
            row = query.one_or_none()
        except SQLAlchemyError as exc:
            self._failed("get_employee", exc, employee_id=employee_id)
        if row is None:
            return None
        return EmployeePayProfile(
            employee_id=row.id,
            name=row.name,
            unit_pay=row.unit_pay,
            hourly_overtime_pay=row.hourly_overtime_pay,
        )

    def find_assignments(
        self, employee_id: str, start_date: date, end_date: date
    ) -> List[SiteAssignment]:
        query = (
            self.session.query(SiteDate.id, SiteDate.date, Site.name, Site.unit_pay_condition)
            .join(Site, SiteDate.site_id == Site.id)
            .filter(
                SiteDate.date >= start_date,
                SiteDate.date <= end_date,
                SiteDate.assignments.any(SiteDateEmployee.employee_id == employee_id),
            )
            .order_by(SiteDate.date.asc(), Site.name.asc(), SiteDate.id.asc())
        )
        if self.registrar_id is not None:
            query = query.filter(Site.registrar_id == self.registrar_id)
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            self._failed("find_assignments", exc, employee_id=employee_id)
        return [
            SiteAssignment(
                site_date_id=row.id,
                work_date=row.date,
                site_name=row.name,
                unit_pay_condition=row.unit_pay_condition,
            )
            for row in rows
        ]

    def _failed(self, operation: str, exc: SQLAlchemyError, **context) -> NoReturn:
        logger.error("payroll_data_source_error", operation=operation, error=str(exc), **context)
        capture_data_source_failure(exc)
        raise DataSourceError(operation, exc) from exc
