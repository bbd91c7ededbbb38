from datetime import date

from sqlalchemy.orm import Session

from sitepay.models import Employee, Site, SiteDate, SiteDateEmployee, UnitPayHistory


def seed(session: Session, registrar_id: str | None = None) -> Employee:
    """Insert one staff member with a week of assignments across pay conditions."""
    employee = Employee(
        registrar_id=registrar_id,
        name="Taro Yamada",
        phone="090-1234-5678",
        birth_date=date(1990, 4, 1),
        unit_pay=15000,
        hourly_overtime_pay=2000,
    )
    session.add(employee)
    session.flush()

    session.add(UnitPayHistory(employee_id=employee.id, unit_pay=15000, effective_date=date(2024, 1, 1)))

    sites = [
        Site(registrar_id=registrar_id, name="Harbor Warehouse", client="Minato Logistics", unit_pay_condition="normal"),
        Site(registrar_id=registrar_id, name="Station Plaza", client="Ekimae Dev", unit_pay_condition="half"),
        Site(registrar_id=registrar_id, name="Riverside Event", client="Kawabe Events", unit_pay_condition="6000"),
    ]
    session.add_all(sites)
    session.flush()

    for offset, site in enumerate(sites):
        site_date = SiteDate(site_id=site.id, date=date(2024, 3, 4 + offset))
        site_date.assignments.append(
            SiteDateEmployee(
                employee=employee,
                unit_pay=employee.unit_pay,
                hourly_overtime_pay=employee.hourly_overtime_pay,
            )
        )
        session.add(site_date)

    session.commit()
    return employee


if __name__ == "__main__":
    import sitepay.models  # noqa: F401
    from sitepay.db.session import Base, engine, session_scope

    Base.metadata.create_all(bind=engine)
    with session_scope() as db:
        seeded = seed(db)
        print(f"seeded employee {seeded.id}")
