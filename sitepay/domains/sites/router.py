import calendar
import math
import re
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import and_, or_
from sqlalchemy.orm import Query as OrmQuery
from sqlalchemy.orm import Session, selectinload

from sitepay.api.deps import get_registrar_id
from sitepay.core.logging import get_logger
from sitepay.db.session import get_session
from sitepay.domains.payroll.pay_conditions import DEFAULT_CONDITION, UnitPayCondition, is_known_condition
from sitepay.models.employee import Employee
from sitepay.models.site import Site, SiteDate, SiteDateEmployee

router = APIRouter(prefix="/api/sites", tags=["sites"])
logger = get_logger(__name__)

POSTAL_CODE_PATTERN = re.compile(r"^\d{3}-\d{4}$")
MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")


class SiteDateIn(BaseModel):
    date: date
    startTime: datetime | None = None
    endTime: datetime | None = None
    employeeIds: list[str] = []


class SiteDateUpdate(BaseModel):
    startTime: datetime | None = None
    endTime: datetime | None = None
    employeeIds: list[str] = []


class SiteCreate(BaseModel):
    name: str = Field(..., min_length=1)
    client: str = Field(..., min_length=1)
    contactPerson: str = Field(..., min_length=1)
    contactPhone: str = Field(..., min_length=1)
    postalCode: str | None = None
    address: str = Field(..., min_length=1)
    googleMapLink: str | None = None
    notes: str | None = None
    unitPayCondition: str | None = None
    siteDates: list[SiteDateIn] = []

    @field_validator("postalCode")
    @classmethod
    def check_postal_code(cls, value: str | None) -> str | None:
        if not value:
            return None
        if not POSTAL_CODE_PATTERN.match(value):
            raise ValueError("Postal code must look like 123-4567")
        return value

    @field_validator("googleMapLink")
    @classmethod
    def check_map_link(cls, value: str | None) -> str | None:
        if not value:
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("Google Maps link must be a URL")
        return value

    @field_validator("unitPayCondition")
    @classmethod
    def check_condition(cls, value: str | None) -> str:
        if not value:
            return DEFAULT_CONDITION
        if not is_known_condition(value):
            allowed = ", ".join(c.value for c in UnitPayCondition)
            raise ValueError(f"unitPayCondition must be one of: {allowed}")
        return value


class AssignedEmployeeOut(BaseModel):
    id: str
    name: str
    unitPay: int | None = None
    hourlyOvertimePay: int | None = None


class SiteDateOut(BaseModel):
    id: str
    siteId: str
    date: date
    startTime: datetime | None = None
    endTime: datetime | None = None
    employees: list[AssignedEmployeeOut] = []


class SiteOut(BaseModel):
    id: str
    name: str
    client: str
    contactPerson: str
    contactPhone: str
    postalCode: str | None = None
    address: str
    googleMapLink: str | None = None
    notes: str | None = None
    unitPayCondition: str
    createdAt: datetime | None = None
    siteDates: list[SiteDateOut] = []


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class SiteListOut(BaseModel):
    sites: list[SiteOut]
    pagination: Pagination


class CalendarOut(BaseModel):
    sites: list[SiteOut]


class SiteMutationOut(BaseModel):
    message: str
    site: SiteOut


class SiteDateMutationOut(BaseModel):
    message: str
    siteDate: SiteDateOut


class ConditionBackfillOut(BaseModel):
    message: str
    updatedCount: int


def serialize_site_date(row: SiteDate) -> SiteDateOut:
    return SiteDateOut(
        id=row.id,
        siteId=row.site_id,
        date=row.date,
        startTime=row.start_time,
        endTime=row.end_time,
        employees=[
            AssignedEmployeeOut(
                id=a.employee.id,
                name=a.employee.name,
                unitPay=a.unit_pay,
                hourlyOvertimePay=a.hourly_overtime_pay,
            )
            for a in sorted(row.assignments, key=lambda a: (a.employee.name, a.employee.id))
        ],
    )


def serialize_site(row: Site) -> SiteOut:
    return SiteOut(
        id=row.id,
        name=row.name,
        client=row.client,
        contactPerson=row.contact_person,
        contactPhone=row.contact_phone,
        postalCode=row.postal_code,
        address=row.address,
        googleMapLink=row.google_map_link,
        notes=row.notes,
        unitPayCondition=row.unit_pay_condition,
        createdAt=row.created_at,
        siteDates=[serialize_site_date(d) for d in row.site_dates],
    )


def _scoped(query: OrmQuery, registrar_id: str | None) -> OrmQuery:
    if registrar_id is None:
        return query
    return query.filter(Site.registrar_id == registrar_id)


def _with_dates(query: OrmQuery) -> OrmQuery:
    return query.options(
        selectinload(Site.site_dates)
        .selectinload(SiteDate.assignments)
        .selectinload(SiteDateEmployee.employee)
    )


def _in_range(start: date, end: date):
    return Site.site_dates.any(and_(SiteDate.date >= start, SiteDate.date <= end))


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail=f"Invalid month: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def get_site_or_404(db: Session, site_id: str, registrar_id: str | None) -> Site:
    row = _scoped(_with_dates(db.query(Site)).filter(Site.id == site_id), registrar_id).one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Site not found")
    return row


def get_site_date_or_404(db: Session, site_id: str, date_id: str, registrar_id: str | None) -> SiteDate:
    query = (
        db.query(SiteDate)
        .join(Site, SiteDate.site_id == Site.id)
        .filter(SiteDate.id == date_id, Site.id == site_id)
    )
    row = _scoped(query, registrar_id).one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Site date not found")
    return row


def build_assignments(
    db: Session, employee_ids: list[str], registrar_id: str | None
) -> list[SiteDateEmployee]:
    """Assignment rows for the given employees, snapshotting their current rates."""
    unique_ids = list(dict.fromkeys(employee_ids))
    if not unique_ids:
        return []
    query = db.query(Employee).filter(Employee.id.in_(unique_ids))
    if registrar_id is not None:
        query = query.filter(Employee.registrar_id == registrar_id)
    employees = {e.id: e for e in query.all()}
    unknown = [employee_id for employee_id in unique_ids if employee_id not in employees]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Employee not found: {', '.join(unknown)}")
    return [
        SiteDateEmployee(
            employee=employees[employee_id],
            unit_pay=employees[employee_id].unit_pay,
            hourly_overtime_pay=employees[employee_id].hourly_overtime_pay,
        )
        for employee_id in unique_ids
    ]


def _apply(db: Session, row: Site, payload: SiteCreate, registrar_id: str | None) -> None:
    row.name = payload.name.strip()
    row.client = payload.client.strip()
    row.contact_person = payload.contactPerson.strip()
    row.contact_phone = payload.contactPhone.strip()
    row.postal_code = payload.postalCode
    row.address = payload.address.strip()
    row.google_map_link = payload.googleMapLink
    row.notes = payload.notes
    row.unit_pay_condition = payload.unitPayCondition or DEFAULT_CONDITION
    row.site_dates = [
        SiteDate(
            date=site_date.date,
            start_time=site_date.startTime,
            end_time=site_date.endTime,
            assignments=build_assignments(db, site_date.employeeIds, registrar_id),
        )
        for site_date in payload.siteDates
    ]


@router.get("", response_model=SiteListOut)
def list_sites(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    month: str = "",
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    query = _scoped(db.query(Site), registrar_id)
    term = search.strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(
            or_(Site.name.ilike(pattern), Site.client.ilike(pattern), Site.contact_person.ilike(pattern))
        )
    if month:
        match = MONTH_PATTERN.match(month.strip())
        if not match:
            raise HTTPException(status_code=400, detail=f"Invalid month: {month}")
        query = query.filter(_in_range(*month_bounds(int(match.group(1)), int(match.group(2)))))

    total = query.count()
    rows = (
        _with_dates(query)
        .order_by(Site.created_at.desc(), Site.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return SiteListOut(
        sites=[serialize_site(r) for r in rows],
        pagination=Pagination(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit)),
    )


@router.post("", response_model=SiteMutationOut, status_code=201)
def create_site(
    payload: SiteCreate,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = Site(registrar_id=registrar_id)
    _apply(db, row, payload, registrar_id)
    db.add(row)
    db.commit()

    logger.info(
        "site_created",
        site_id=row.id,
        unit_pay_condition=row.unit_pay_condition,
        site_dates=len(payload.siteDates),
    )
    return SiteMutationOut(message="Site registered", site=serialize_site(get_site_or_404(db, row.id, registrar_id)))


@router.post("/update-unit-pay-conditions", response_model=ConditionBackfillOut)
def backfill_unit_pay_conditions(
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    query = _scoped(db.query(Site).filter(Site.unit_pay_condition == ""), registrar_id)
    updated = query.update({Site.unit_pay_condition: DEFAULT_CONDITION}, synchronize_session=False)
    db.commit()

    logger.info("site_unit_pay_conditions_backfilled", updated=updated, registrar_id=registrar_id)
    return ConditionBackfillOut(message=f"Updated {updated} site(s)", updatedCount=updated)


@router.get("/calendar", response_model=CalendarOut)
def calendar_sites(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = None,
    day: date | None = Query(None, alias="date"),
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    query = _scoped(db.query(Site), registrar_id)
    if day is not None:
        query = query.filter(_in_range(day, day))
    elif year is not None and month is not None:
        query = query.filter(_in_range(*month_bounds(year, month)))

    rows = _with_dates(query).order_by(Site.name.asc(), Site.id.asc()).all()
    return CalendarOut(sites=[serialize_site(r) for r in rows])


@router.get("/{site_id}", response_model=SiteOut)
def get_site(
    site_id: str,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    return serialize_site(get_site_or_404(db, site_id, registrar_id))


@router.put("/{site_id}", response_model=SiteMutationOut)
def update_site(
    site_id: str,
    payload: SiteCreate,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = get_site_or_404(db, site_id, registrar_id)
    # existing dates and their assignments are replaced wholesale
    _apply(db, row, payload, registrar_id)
    db.commit()

    logger.info("site_updated", site_id=row.id, site_dates=len(payload.siteDates))
    return SiteMutationOut(message="Site updated", site=serialize_site(get_site_or_404(db, site_id, registrar_id)))


@router.delete("/{site_id}", status_code=204)
def delete_site(
    site_id: str,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = get_site_or_404(db, site_id, registrar_id)
    db.delete(row)
    db.commit()
    logger.info("site_deleted", site_id=site_id)
    return None


@router.get("/{site_id}/dates/{date_id}", response_model=SiteDateOut)
def get_site_date(
    site_id: str,
    date_id: str,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    return serialize_site_date(get_site_date_or_404(db, site_id, date_id, registrar_id))


@router.put("/{site_id}/dates/{date_id}", response_model=SiteDateMutationOut)
def update_site_date(
    site_id: str,
    date_id: str,
    payload: SiteDateUpdate,
    db: Session = Depends(get_session),
    registrar_id: str | None = Depends(get_registrar_id),
):
    row = get_site_date_or_404(db, site_id, date_id, registrar_id)
    assignments = build_assignments(db, payload.employeeIds, registrar_id)

    row.start_time = payload.startTime
    row.end_time = payload.endTime
    row.assignments = []
    # flush the removals first so re-assigning an employee does not trip the unique constraint
    db.flush()
    row.assignments = assignments
    db.commit()
    db.refresh(row)

    logger.info("site_date_updated", site_id=site_id, site_date_id=date_id, employees=len(assignments))
    return SiteDateMutationOut(message="Site date updated", siteDate=serialize_site_date(row))
