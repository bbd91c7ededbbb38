import datetime as dt

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from sitepay.api.deps import get_registrar_id
from sitepay.core.logging import get_logger
from sitepay.db.session import get_session

from .calculator import PayrollCalculator
from .exceptions import PayrollCalculationFailed, PayrollError
from .models import PayrollReport
from .repository import SqlAssignmentRepository

router = APIRouter(prefix="/api/payroll", tags=["payroll"])
logger = get_logger(__name__)


class PayrollCalculateRequest(BaseModel):
    # fields are optional here so absent values surface as MissingParameter (400)
    model_config = ConfigDict(coerce_numbers_to_str=True)

    employeeId: str | None = None
    startDate: str | None = None
    endDate: str | None = None


class AssignmentDetailOut(BaseModel):
    date: dt.date
    siteName: str
    unitPayCondition: str
    effectiveUnitPay: int


class PayrollCalculationOut(BaseModel):
    employeeId: str
    employeeName: str
    unitPay: int
    hourlyOvertimePay: int
    totalAssignments: int
    baseSalary: int
    overtimeHours: int
    overtimePay: int
    totalSalary: int
    assignmentDetails: list[AssignmentDetailOut]


def _serialize(report: PayrollReport) -> PayrollCalculationOut:
    return PayrollCalculationOut(
        employeeId=report.employee_id,
        employeeName=report.employee_name,
        unitPay=report.unit_pay,
        hourlyOvertimePay=report.hourly_overtime_pay,
        totalAssignments=report.total_assignments,
        baseSalary=report.base_salary,
        overtimeHours=report.overtime_hours,
        overtimePay=report.overtime_pay,
        totalSalary=report.total_salary,
        assignmentDetails=[
            AssignmentDetailOut(
                date=d.work_date,
                siteName=d.site_name,
                unitPayCondition=d.unit_pay_condition,
                effectiveUnitPay=d.effective_unit_pay,
            )
            for d in report.assignment_details
        ],
    )


@router.post("/calculate", response_model=PayrollCalculationOut)
def calculate_payroll(
    payload: PayrollCalculateRequest,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
) -> PayrollCalculationOut:
    logger.info(
        "payroll_calculation_requested",
        employee_id=payload.employeeId,
        start_date=payload.startDate,
        end_date=payload.endDate,
    )
    calculator = PayrollCalculator(SqlAssignmentRepository(db, registrar_id=registrar_id))
    try:
        report = calculator.calculate(payload.employeeId, payload.startDate, payload.endDate)
    except PayrollError:
        raise
    except Exception as exc:
        logger.exception("payroll_calculation_crashed", employee_id=payload.employeeId)
        raise PayrollCalculationFailed() from exc
    return _serialize(report)
