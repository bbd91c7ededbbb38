from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from sitepay.db.session import Base
from sitepay.models._ids import new_id


class Site(Base):
    __tablename__ = "sites"

    id = Column(String(32), primary_key=True, default=new_id)
    registrar_id = Column(String(64), nullable=True, index=True)

    name = Column(String(200), nullable=False)
    client = Column(String(200), nullable=False, default="")
    contact_person = Column(String(200), nullable=False, default="")
    contact_phone = Column(String(50), nullable=False, default="")
    postal_code = Column(String(16), nullable=True)
    address = Column(String(255), nullable=False, default="")
    google_map_link = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    # normal|half|6000|5000|3000; legacy rows may hold ""
    unit_pay_condition = Column(String(20), nullable=False, default="normal")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    site_dates = relationship(
        "SiteDate",
        back_populates="site",
        cascade="all, delete-orphan",
        order_by="SiteDate.date.asc()",
    )


class SiteDate(Base):
    __tablename__ = "site_dates"

    id = Column(String(32), primary_key=True, default=new_id)
    site_id = Column(String(32), ForeignKey("sites.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    site = relationship("Site", back_populates="site_dates")
    assignments = relationship(
        "SiteDateEmployee", back_populates="site_date", cascade="all, delete-orphan"
    )


class SiteDateEmployee(Base):
    __tablename__ = "site_date_employees"
    __table_args__ = (
        UniqueConstraint("site_date_id", "employee_id", name="uq_site_date_employee"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    site_date_id = Column(String(32), ForeignKey("site_dates.id"), nullable=False, index=True)
    employee_id = Column(String(32), ForeignKey("employees.id"), nullable=False, index=True)

    # snapshot columns kept alongside the assignment; payroll reads the employee's current rate
    unit_pay = Column(Integer, nullable=True)
    hourly_overtime_pay = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    site_date = relationship("SiteDate", back_populates="assignments")
    employee = relationship("Employee", back_populates="assignments")
