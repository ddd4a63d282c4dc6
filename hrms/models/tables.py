"""SQLAlchemy table mappings for the employee aggregate."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)

from hrms.core.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _created_at() -> Column:
    return Column(DateTime(timezone=True), default=utcnow, nullable=False)


def _updated_at() -> Column:
    return Column(DateTime(timezone=True), default=utcnow, nullable=False)


def _money() -> Column:
    return Column(Numeric(15, 2, asdecimal=False), nullable=True)


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    code = Column(String(10), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = _created_at()
    updated_at = _updated_at()


class Employee(Base):
    __tablename__ = "employees"

    number = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(50), nullable=False, unique=True, index=True)
    full_name_english = Column(String(150), nullable=False)
    full_name_vietnamese = Column(String(150), nullable=False)
    display_name = Column(String(100), nullable=True)
    employment_status = Column(String(20), nullable=False, default="Active")
    marital_status = Column(String(20), nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()


class PersonalInfo(Base):
    __tablename__ = "personal_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=False, index=True)
    identity_card_number = Column(String(20))
    identity_card_issued_date = Column(Date)
    identity_card_issued_place = Column(String(200))
    passport_number = Column(String(20))
    passport_issued_date = Column(Date)
    passport_expired_date = Column(Date)
    passport_issued_place = Column(String(200))
    date_of_birth = Column(Date)
    place_of_birth = Column(String(200))
    nationality = Column(String(50))
    gender = Column(String(10))
    ethnic = Column(String(50))
    religion = Column(String(50))
    tax_code = Column(String(20))
    social_insurance_number = Column(String(20))
    health_insurance_number = Column(String(20))
    academic_level = Column(String(100))
    certificate = Column(Text)
    created_at = _created_at()
    updated_at = _updated_at()


class ContactInfo(Base):
    __tablename__ = "contact_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=False, index=True)
    mobile_phone = Column(String(20))
    permanent_address = Column(Text)
    temporary_address = Column(Text)
    personal_email = Column(String(100))
    company_email = Column(String(100))
    created_at = _created_at()
    updated_at = _updated_at()


class EmploymentInfo(Base):
    __tablename__ = "employment_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    manager_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=True)
    position_vietnamese = Column(String(100))
    position_english = Column(String(100))
    grade = Column(String(50))
    onboarding_date = Column(Date)
    official_resignation_date = Column(Date)
    last_working_date = Column(Date)
    status_of_contract = Column(String(100))
    status_of_compulsory_insurance = Column(String(100))
    working_type = Column(String(20))
    trade_union_registration = Column(Boolean, nullable=False, default=False)
    employee_status = Column(String(20), nullable=False, default="Normal")
    status_from_date = Column(Date)
    status_to_date = Column(Date)
    created_at = _created_at()
    updated_at = _updated_at()


class FinancialInfo(Base):
    __tablename__ = "financial_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=False, index=True)
    basic_salary = _money()
    position_allowance = _money()
    meal_allowance = _money()
    travel_allowance = _money()
    other_allowance = _money()
    bank_name = Column(String(100))
    bank_account_number = Column(String(20))
    bank_account_holder = Column(String(150))
    currency = Column(String(3), default="VND")
    created_at = _created_at()
    updated_at = _updated_at()
