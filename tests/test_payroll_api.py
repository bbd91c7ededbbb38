from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from sitepay.domains.payroll.exceptions import DataSourceError
from sitepay.domains.payroll.repository import SqlAssignmentRepository
from sitepay.models import Employee, Site, SiteDate, SiteDateEmployee


def add_employee(db, unit_pay=15000, name="Taro Yamada", registrar_id=None, hourly_overtime_pay=2000):
    employee = Employee(
        name=name,
        phone="090-0000-0000",
        unit_pay=unit_pay,
        hourly_overtime_pay=hourly_overtime_pay,
        registrar_id=registrar_id,
    )
    db.add(employee)
    db.commit()
    return employee


def add_assignment(db, employee, work_date, site_name, condition="normal", registrar_id=None):
    site = Site(name=site_name, client="Client", unit_pay_condition=condition, registrar_id=registrar_id)
    site_date = SiteDate(date=work_date)
    site_date.assignments.append(SiteDateEmployee(employee=employee))
    site.site_dates.append(site_date)
    db.add(site)
    db.commit()
    return site_date


def calculate(client, employee_id, start="2024-03-01", end="2024-03-31", headers=None):
    return client.post(
        "/api/payroll/calculate",
        json={"employeeId": employee_id, "startDate": start, "endDate": end},
        headers=headers or {},
    )


def test_calculate_mixed_conditions(client, db_session):
    employee = add_employee(db_session)
    add_assignment(db_session, employee, date(2024, 3, 6), "Riverside", "6000")
    add_assignment(db_session, employee, date(2024, 3, 4), "Harbor", "normal")
    add_assignment(db_session, employee, date(2024, 3, 5), "Station", "half")

    response = calculate(client, employee.id)

    assert response.status_code == 200
    body = response.json()
    assert body["employeeId"] == employee.id
    assert body["employeeName"] == "Taro Yamada"
    assert body["unitPay"] == 15000
    assert body["hourlyOvertimePay"] == 2000
    assert body["totalAssignments"] == 3
    assert body["baseSalary"] == 28500
    assert body["overtimeHours"] == 0
    assert body["overtimePay"] == 0
    assert body["totalSalary"] == 28500
    assert body["assignmentDetails"] == [
        {"date": "2024-03-04", "siteName": "Harbor", "unitPayCondition": "normal", "effectiveUnitPay": 15000},
        {"date": "2024-03-05", "siteName": "Station", "unitPayCondition": "half", "effectiveUnitPay": 7500},
        {"date": "2024-03-06", "siteName": "Riverside", "unitPayCondition": "6000", "effectiveUnitPay": 6000},
    ]


def test_blank_site_condition_is_paid_as_normal(client, db_session):
    employee = add_employee(db_session, unit_pay=10000)
    add_assignment(db_session, employee, date(2024, 3, 4), "Legacy Site", "")

    body = calculate(client, employee.id).json()

    assert body["assignmentDetails"][0]["effectiveUnitPay"] == 10000
    assert body["assignmentDetails"][0]["unitPayCondition"] == "normal"
    assert body["totalSalary"] == 10000


def test_site_date_shared_with_other_staff_counts_once(client, db_session):
    employee = add_employee(db_session)
    colleague = add_employee(db_session, name="Jiro")
    site_date = add_assignment(db_session, employee, date(2024, 3, 4), "Harbor")
    site_date.assignments.append(SiteDateEmployee(employee=colleague))
    db_session.commit()

    body = calculate(client, employee.id).json()

    assert body["totalAssignments"] == 1
    assert body["baseSalary"] == 15000


def test_only_requested_employee_and_range_are_counted(client, db_session):
    employee = add_employee(db_session)
    colleague = add_employee(db_session, name="Jiro")
    add_assignment(db_session, employee, date(2024, 3, 1), "Start")
    add_assignment(db_session, employee, date(2024, 3, 31), "End")
    add_assignment(db_session, employee, date(2024, 4, 1), "Next month")
    add_assignment(db_session, colleague, date(2024, 3, 10), "Not mine")

    body = calculate(client, employee.id).json()

    assert [d["siteName"] for d in body["assignmentDetails"]] == ["Start", "End"]


def test_empty_range(client, db_session):
    employee = add_employee(db_session)

    response = calculate(client, employee.id)

    assert response.status_code == 200
    body = response.json()
    assert body["totalAssignments"] == 0
    assert body["baseSalary"] == 0
    assert body["assignmentDetails"] == []


def test_missing_parameters_are_client_errors(client):
    response = client.post("/api/payroll/calculate", json={"startDate": "2024-03-01"})

    assert response.status_code == 400
    assert "employeeId" in response.json()["error"]
    assert "endDate" in response.json()["error"]


def test_unknown_employee_is_404(client):
    response = calculate(client, "does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Employee does-not-exist not found"}


def test_missing_unit_pay_is_400(client, db_session):
    employee = add_employee(db_session, unit_pay=None)
    add_assignment(db_session, employee, date(2024, 3, 4), "Harbor")

    response = calculate(client, employee.id)

    assert response.status_code == 400
    assert "Unit pay is not set" in response.json()["error"]


def test_reversed_range_is_400(client, db_session):
    employee = add_employee(db_session)

    response = calculate(client, employee.id, start="2024-03-31", end="2024-03-01")

    assert response.status_code == 400
    assert "after" in response.json()["error"]


def test_unparseable_date_is_400(client, db_session):
    employee = add_employee(db_session)

    response = calculate(client, employee.id, start="yesterday")

    assert response.status_code == 400
    assert "startDate" in response.json()["error"]


def test_registrar_scope_hides_other_tenants(client, db_session):
    employee = add_employee(db_session, registrar_id="tenant-a")
    add_assignment(db_session, employee, date(2024, 3, 4), "Harbor", registrar_id="tenant-a")

    own = calculate(client, employee.id, headers={"X-Registrar-Id": "tenant-a"})
    other = calculate(client, employee.id, headers={"X-Registrar-Id": "tenant-b"})

    assert own.status_code == 200
    assert own.json()["totalAssignments"] == 1
    assert other.status_code == 404


def test_data_source_failure_is_500(client, db_session, monkeypatch):
    employee = add_employee(db_session)

    def broken(self, employee_id, start_date, end_date):
        raise DataSourceError("find_assignments")

    monkeypatch.setattr(SqlAssignmentRepository, "find_assignments", broken)

    response = calculate(client, employee.id)

    assert response.status_code == 500
    assert response.json() == {"error": "Data source failure during find_assignments"}


def test_repository_wraps_sqlalchemy_errors():
    session = MagicMock()
    session.query.return_value.filter.return_value.one_or_none.side_effect = OperationalError(
        "SELECT 1", {}, Exception("connection lost")
    )
    repo = SqlAssignmentRepository(session)

    with pytest.raises(DataSourceError) as excinfo:
        repo.get_employee("emp1")

    assert excinfo.value.operation == "get_employee"
    assert isinstance(excinfo.value.cause, OperationalError)


def test_unexpected_failure_is_json_500(client, db_session, monkeypatch):
    employee = add_employee(db_session)

    def crash(self, employee_id, start_date, end_date):
        raise RuntimeError("driver exploded")

    monkeypatch.setattr(SqlAssignmentRepository, "find_assignments", crash)

    response = calculate(client, employee.id)

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": "Payroll calculation failed"}
