from sitepay.domains.payroll.calculator import PayrollCalculator
from sitepay.domains.payroll.repository import SqlAssignmentRepository
from sitepay.seed.seed_data import seed


def test_seeded_employee_payroll(db_session):
    employee = seed(db_session, registrar_id="demo")

    report = PayrollCalculator(SqlAssignmentRepository(db_session, registrar_id="demo")).calculate(
        employee.id, "2024-03-01", "2024-03-31"
    )

    assert report.total_assignments == 3
    assert report.base_salary == 28500
    assert [d.site_name for d in report.assignment_details] == [
        "Harbor Warehouse",
        "Station Plaza",
        "Riverside Event",
    ]
