from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from sitepay.db.session import Base
from sitepay.models._ids import new_id


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String(32), primary_key=True, default=new_id)

    # tenant marker; scoping is applied by the repositories, not enforced here
    registrar_id = Column(String(64), nullable=True, index=True)

    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    birth_date = Column(Date, nullable=True)
    blood_type = Column(String(8), nullable=True)
    blood_pressure = Column(String(16), nullable=True)  # "120/80"
    address = Column(String(255), nullable=True)
    postal_code = Column(String(16), nullable=True)
    emergency_contact_person = Column(String(200), nullable=True)
    emergency_contact_phone = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    # payroll cannot run for an employee without a unit pay
    unit_pay = Column(Integer, nullable=True)
    hourly_overtime_pay = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    unit_pay_history = relationship(
        "UnitPayHistory",
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by="UnitPayHistory.effective_date.desc()",
    )
    assignments = relationship(
        "SiteDateEmployee", back_populates="employee", cascade="all, delete-orphan"
    )


class UnitPayHistory(Base):
    __tablename__ = "unit_pay_history"

    id = Column(String(32), primary_key=True, default=new_id)
    employee_id = Column(String(32), ForeignKey("employees.id"), nullable=False, index=True)
    unit_pay = Column(Integer, nullable=False)
    effective_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    employee = relationship("Employee", back_populates="unit_pay_history")
