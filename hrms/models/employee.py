"""Employee aggregate models: request bodies, stored records and composite views."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


class EmploymentStatus(str, Enum):
    ACTIVE = "Active"
    TERMINATED = "Terminated"
    PRE_ONBOARDING = "Pre-onboarding"
    ONBOARDING = "Onboarding"


class MaritalStatus(str, Enum):
    SINGLE = "Single"
    MARRIED = "Married"
    DIVORCED = "Divorced"
    WIDOWED = "Widowed"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class WorkingType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERN = "Intern"


class EmployeeStatus(str, Enum):
    NORMAL = "Normal"
    ON_LEAVE = "On Leave"
    SUSPENDED = "Suspended"
    NOTICE_PERIOD = "Notice Period"


class ExtensionKind(str, Enum):
    PERSONAL = "personal"
    CONTACT = "contact"
    EMPLOYMENT = "employment"
    FINANCIAL = "financial"


# Never writable by clients.
PROTECTED_EMPLOYEE_FIELDS = frozenset({"employee_id", "number", "created_at", "updated_at"})

EMPLOYEE_SORT_COLUMNS = frozenset(
    {
        "employee_id",
        "number",
        "full_name_english",
        "full_name_vietnamese",
        "display_name",
        "employment_status",
        "marital_status",
        "created_at",
        "updated_at",
    }
)


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"Invalid email address: {e}") from e
    return value


FullName = Annotated[str, Field(min_length=2, max_length=150)]
Email = Annotated[str, Field(max_length=100), AfterValidator(_check_email)]


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class _Payload(BaseModel):
    model_config = ConfigDict(use_enum_values=True)


# Employee core


class EmployeeCreate(_Payload):
    """Body of POST /employees. System fields are ignored when supplied."""

    employee_id: str | None = Field(None, min_length=3, max_length=50)
    full_name_english: FullName
    full_name_vietnamese: FullName
    display_name: str | None = Field(None, max_length=100)
    employment_status: EmploymentStatus = Field(EmploymentStatus.ACTIVE, validate_default=True)
    marital_status: MaritalStatus | None = None

    @field_validator("employee_id", mode="before")
    @classmethod
    def _blank_id_is_missing(cls, value):
        return None if value == "" else value


class EmployeeUpdate(_Payload):
    """Body of PUT /employees/{id}. Unknown and system fields are dropped."""

    full_name_english: str | None = Field(None, min_length=2, max_length=150)
    full_name_vietnamese: str | None = Field(None, min_length=2, max_length=150)
    display_name: str | None = Field(None, max_length=100)
    employment_status: EmploymentStatus | None = None
    marital_status: MaritalStatus | None = None

    @field_validator("full_name_english", "full_name_vietnamese", "employment_status")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class EmployeeRecord(_Record):
    employee_id: str
    number: int
    full_name_english: str
    full_name_vietnamese: str
    display_name: str | None = None
    employment_status: EmploymentStatus
    marital_status: MaritalStatus | None = None
    created_at: datetime
    updated_at: datetime


# Extension records


class PersonalInfoUpdate(_Payload):
    gender: Gender | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = Field(None, max_length=200)
    nationality: str | None = Field(None, max_length=50)
    ethnic: str | None = Field(None, max_length=50)
    religion: str | None = Field(None, max_length=50)
    identity_card_number: str | None = Field(None, max_length=20)
    identity_card_issued_date: date | None = None
    identity_card_issued_place: str | None = Field(None, max_length=200)
    passport_number: str | None = Field(None, max_length=20)
    passport_issued_date: date | None = None
    passport_expired_date: date | None = None
    passport_issued_place: str | None = Field(None, max_length=200)
    tax_code: str | None = Field(None, max_length=20)
    social_insurance_number: str | None = Field(None, max_length=20)
    health_insurance_number: str | None = Field(None, max_length=20)
    academic_level: str | None = Field(None, max_length=100)
    certificate: str | None = None


class PersonalInfo(_Record):
    id: int
    employee_id: str
    gender: Gender | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    nationality: str | None = None
    ethnic: str | None = None
    religion: str | None = None
    identity_card_number: str | None = None
    identity_card_issued_date: date | None = None
    identity_card_issued_place: str | None = None
    passport_number: str | None = None
    passport_issued_date: date | None = None
    passport_expired_date: date | None = None
    passport_issued_place: str | None = None
    tax_code: str | None = None
    social_insurance_number: str | None = None
    health_insurance_number: str | None = None
    academic_level: str | None = None
    certificate: str | None = None
    created_at: datetime
    updated_at: datetime


class ContactInfoUpdate(_Payload):
    mobile_phone: str | None = Field(None, max_length=20)
    permanent_address: str | None = None
    temporary_address: str | None = None
    personal_email: Email | None = None
    company_email: Email | None = None


class ContactInfo(_Record):
    id: int
    employee_id: str
    mobile_phone: str | None = None
    permanent_address: str | None = None
    temporary_address: str | None = None
    personal_email: str | None = None
    company_email: str | None = None
    created_at: datetime
    updated_at: datetime


class EmploymentInfoUpdate(_Payload):
    department_id: int | None = None
    manager_id: str | None = Field(None, max_length=50)
    position_english: str | None = Field(None, max_length=100)
    position_vietnamese: str | None = Field(None, max_length=100)
    grade: str | None = Field(None, max_length=50)
    onboarding_date: date | None = None
    official_resignation_date: date | None = None
    last_working_date: date | None = None
    status_of_contract: str | None = Field(None, max_length=100)
    status_of_compulsory_insurance: str | None = Field(None, max_length=100)
    working_type: WorkingType | None = None
    trade_union_registration: bool | None = None
    employee_status: EmployeeStatus | None = None
    status_from_date: date | None = None
    status_to_date: date | None = None

    @field_validator("trade_union_registration", "employee_status")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class EmploymentInfo(_Record):
    id: int
    employee_id: str
    department_id: int | None = None
    manager_id: str | None = None
    position_english: str | None = None
    position_vietnamese: str | None = None
    grade: str | None = None
    onboarding_date: date | None = None
    official_resignation_date: date | None = None
    last_working_date: date | None = None
    status_of_contract: str | None = None
    status_of_compulsory_insurance: str | None = None
    working_type: WorkingType | None = None
    trade_union_registration: bool = False
    employee_status: EmployeeStatus = EmployeeStatus.NORMAL
    status_from_date: date | None = None
    status_to_date: date | None = None
    created_at: datetime
    updated_at: datetime


class FinancialInfoUpdate(_Payload):
    basic_salary: float | None = Field(None, ge=0)
    position_allowance: float | None = Field(None, ge=0)
    meal_allowance: float | None = Field(None, ge=0)
    travel_allowance: float | None = Field(None, ge=0)
    other_allowance: float | None = Field(None, ge=0)
    bank_name: str | None = Field(None, max_length=100)
    bank_account_number: str | None = Field(None, max_length=20)
    bank_account_holder: str | None = Field(None, max_length=150)
    currency: str | None = Field(None, max_length=3)


class FinancialInfo(_Record):
    id: int
    employee_id: str
    basic_salary: float | None = None
    position_allowance: float | None = None
    meal_allowance: float | None = None
    travel_allowance: float | None = None
    other_allowance: float | None = None
    bank_name: str | None = None
    bank_account_number: str | None = None
    bank_account_holder: str | None = None
    currency: str | None = None
    created_at: datetime
    updated_at: datetime


# Composite views


class DepartmentRef(_Record):
    id: int
    name: str
    code: str


class ManagerRef(_Record):
    employee_id: str
    full_name_english: str


class EmploymentInfoDetail(EmploymentInfo):
    department: DepartmentRef | None = None
    manager: ManagerRef | None = None


class EmployeeDetail(EmployeeRecord):
    """GET /employees/{id}: the employee with all extension records."""

    personal_info: PersonalInfo | None = None
    contact_info: ContactInfo | None = None
    employment_info: EmploymentInfoDetail | None = None
    financial_info: FinancialInfo | None = None


class EmploymentSummary(_Record):
    id: int
    position_english: str | None = None
    position_vietnamese: str | None = None
    onboarding_date: date | None = None
    department: DepartmentRef | None = None


class ContactSummary(_Record):
    company_email: str | None = None
    personal_email: str | None = None
    mobile_phone: str | None = None


class EmployeeListItem(EmployeeRecord):
    """Row of GET /employees."""

    employment_info: EmploymentSummary | None = None
    contact_info: ContactSummary | None = None


class EmployeeQuery(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    page: int = Field(0, ge=0)
    page_size: int = Field(20, ge=1)
    search: str | None = None
    employment_status: EmploymentStatus | None = None
    department_id: int | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


class EmployeePage(BaseModel):
    data: list[EmployeeListItem]
    page: int
    page_size: int
    total: int
    total_pages: int


EXTENSION_SCHEMAS: dict[ExtensionKind, tuple[type[_Payload], type[_Record]]] = {
    ExtensionKind.PERSONAL: (PersonalInfoUpdate, PersonalInfo),
    ExtensionKind.CONTACT: (ContactInfoUpdate, ContactInfo),
    ExtensionKind.EMPLOYMENT: (EmploymentInfoUpdate, EmploymentInfo),
    ExtensionKind.FINANCIAL: (FinancialInfoUpdate, FinancialInfo),
}
