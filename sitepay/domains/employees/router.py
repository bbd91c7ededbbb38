import math
import re
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Query as OrmQuery
from sqlalchemy.orm import Session

from sitepay.api.deps import get_registrar_id
from sitepay.core.logging import get_logger
from sitepay.db.session import get_session
from sitepay.models.employee import Employee, UnitPayHistory

router = APIRouter(prefix="/api/employees", tags=["employees"])
logger = get_logger(__name__)

MINIMUM_AGE = 16
BLOOD_PRESSURE_PATTERN = re.compile(r"^(\d{2,3})/(\d{2,3})$")


class EmployeeBase(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    birthDate: date | None = None
    bloodType: str | None = None
    bloodPressure: str | None = None
    address: str | None = None
    postalCode: str | None = None
    emergencyContactPerson: str | None = None
    emergencyContactPhone: str | None = None
    unitPay: int | None = Field(default=None, ge=0)
    hourlyOvertimePay: int | None = Field(default=None, ge=0)
    notes: str | None = None

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("birthDate")
    @classmethod
    def old_enough(cls, value: date | None) -> date | None:
        if value is not None and date.today().year - value.year < MINIMUM_AGE:
            raise ValueError(f"Staff must be at least {MINIMUM_AGE} years old")
        return value

    @field_validator("bloodPressure")
    @classmethod
    def normalize_blood_pressure(cls, value: str | None) -> str | None:
        if not value:
            return None
        match = BLOOD_PRESSURE_PATTERN.match(value.strip())
        if not match:
            raise ValueError("Blood pressure must look like 120/80")
        return f"{int(match.group(1))}/{int(match.group(2))}"


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeOut(EmployeeBase):
    id: str
    createdAt: datetime | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class EmployeeListOut(BaseModel):
    employees: list[EmployeeOut]
    pagination: Pagination


class EmployeeMutationOut(BaseModel):
    message: str
    employee: EmployeeOut


class UnitPayChange(BaseModel):
    unitPay: int | None = Field(default=None, ge=0)
    effectiveDate: date | None = None


class UnitPayHistoryOut(BaseModel):
    id: str
    employeeId: str
    unitPay: int
    effectiveDate: date
    createdAt: datetime | None = None


class EmployeeUnitPayOut(BaseModel):
    id: str
    name: str
    unitPay: int | None


class UnitPayHistoryListOut(BaseModel):
    employee: EmployeeUnitPayOut
    unitPayHistory: list[UnitPayHistoryOut]


class UnitPayHistoryCreatedOut(BaseModel):
    message: str
    unitPayHistory: UnitPayHistoryOut


def serialize_employee(row: Employee) -> EmployeeOut:
    return EmployeeOut(
        id=row.id,
        name=row.name,
        phone=row.phone or "-",
        birthDate=row.birth_date,
        bloodType=row.blood_type,
        bloodPressure=row.blood_pressure,
        address=row.address,
        postalCode=row.postal_code,
        emergencyContactPerson=row.emergency_contact_person,
        emergencyContactPhone=row.emergency_contact_phone,
        unitPay=row.unit_pay,
        hourlyOvertimePay=row.hourly_overtime_pay,
        notes=row.notes,
        createdAt=row.created_at,
    )


def _history_out(row: UnitPayHistory) -> UnitPayHistoryOut:
    return UnitPayHistoryOut(
        id=row.id,
        employeeId=row.employee_id,
        unitPay=row.unit_pay,
        effectiveDate=row.effective_date,
        createdAt=row.created_at,
    )


def _scoped(query: OrmQuery, registrar_id: str | None) -> OrmQuery:
    if registrar_id is None:
        return query
    return query.filter(Employee.registrar_id == registrar_id)


def get_employee_or_404(db: Session, employee_id: str, registrar_id: str | None) -> Employee:
    row = _scoped(db.query(Employee).filter(Employee.id == employee_id), registrar_id).one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Employee not found")
    return row


def _apply(row: Employee, payload: EmployeeBase) -> None:
    row.name = payload.name
    row.phone = payload.phone
    row.birth_date = payload.birthDate
    row.blood_type = payload.bloodType
    row.blood_pressure = payload.bloodPressure
    row.address = payload.address
    row.postal_code = payload.postalCode
    row.emergency_contact_person = payload.emergencyContactPerson
    row.emergency_contact_phone = payload.emergencyContactPhone
    row.unit_pay = payload.unitPay
    row.hourly_overtime_pay = payload.hourlyOvertimePay
    row.notes = payload.notes


@router.get("", response_model=EmployeeListOut)
def list_employees(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    query = _scoped(db.query(Employee), registrar_id)
    if search.strip():
        query = query.filter(Employee.name.ilike(f"%{search.strip()}%"))

    total = query.count()
    rows = (
        query.order_by(Employee.created_at.desc(), Employee.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return EmployeeListOut(
        employees=[serialize_employee(r) for r in rows],
        pagination=Pagination(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit)),
    )


@router.post("", response_model=EmployeeMutationOut, status_code=201)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = Employee(registrar_id=registrar_id)
    _apply(row, payload)
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info("employee_created", employee_id=row.id, registrar_id=registrar_id)
    return EmployeeMutationOut(message="Employee registered", employee=serialize_employee(row))


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(
    employee_id: str,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    return serialize_employee(get_employee_or_404(db, employee_id, registrar_id))


@router.put("/{employee_id}", response_model=EmployeeMutationOut)
def update_employee(
    employee_id: str,
    payload: EmployeeCreate,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = get_employee_or_404(db, employee_id, registrar_id)
    previous_unit_pay = row.unit_pay
    _apply(row, payload)
    if payload.unitPay is not None and payload.unitPay != previous_unit_pay:
        db.add(UnitPayHistory(employee_id=row.id, unit_pay=payload.unitPay, effective_date=date.today()))
        logger.info(
            "employee_unit_pay_changed",
            employee_id=row.id,
            previous_unit_pay=previous_unit_pay,
            unit_pay=payload.unitPay,
        )
    db.commit()
    db.refresh(row)
    return EmployeeMutationOut(message="Employee updated", employee=serialize_employee(row))


@router.delete("/{employee_id}", status_code=204)
def delete_employee(
    employee_id: str,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = get_employee_or_404(db, employee_id, registrar_id)
    db.delete(row)
    db.commit()
    logger.info("employee_deleted", employee_id=employee_id)
    return None


@router.get("/{employee_id}/unit-pay", response_model=UnitPayHistoryListOut)
def list_unit_pay_history(
    employee_id: str,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = get_employee_or_404(db, employee_id, registrar_id)
    history = (
        db.query(UnitPayHistory)
        .filter(UnitPayHistory.employee_id == row.id)
        .order_by(UnitPayHistory.effective_date.desc(), UnitPayHistory.created_at.desc())
        .all()
    )
    return UnitPayHistoryListOut(
        employee=EmployeeUnitPayOut(id=row.id, name=row.name, unitPay=row.unit_pay),
        unitPayHistory=[_history_out(h) for h in history],
    )


@router.post("/{employee_id}/unit-pay", response_model=UnitPayHistoryCreatedOut)
def add_unit_pay_history(
    employee_id: str,
    payload: UnitPayChange,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    if payload.unitPay is None or payload.effectiveDate is None:
        raise HTTPException(status_code=400, detail="unitPay and effectiveDate are required")

    row = get_employee_or_404(db, employee_id, registrar_id)
    entry = UnitPayHistory(employee_id=row.id, unit_pay=payload.unitPay, effective_date=payload.effectiveDate)
    db.add(entry)
    db.commit()
    db.refresh(entry)

    logger.info(
        "unit_pay_history_added",
        employee_id=row.id,
        unit_pay=payload.unitPay,
        effective_date=payload.effectiveDate.isoformat(),
    )
    return UnitPayHistoryCreatedOut(message="Unit pay history added", unitPayHistory=_history_out(entry))
