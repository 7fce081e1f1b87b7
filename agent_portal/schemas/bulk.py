from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from agent_portal.schemas.common import Notification

RowStatus = Literal["pending", "valid", "invalid"]

# Daily appointment slots offered for bulk bookings.
TIME_SLOTS = (
    "09:00",
    "10:00",
    "11:00",
    "12:00",
    "14:00",
    "15:00",
    "16:00",
    "17:00",
)


class PaymentMethod(str, Enum):
    BILL_TO_PHONE = "BILL_TO_PHONE"
    DEDUCT_FROM_SALARY = "DEDUCT_FROM_SALARY"


class BulkRow(BaseModel):
    """One candidate appointment in the working batch."""

    id: str
    doctor_name: str = ""
    patient_name: str = ""
    patient_nic: str = ""
    patient_email: str = ""
    patient_phone: str = ""
    payment_method: PaymentMethod = PaymentMethod.BILL_TO_PHONE
    slt_phone_number: str = ""
    employee_nic: str = ""
    date: str = ""
    time: str = ""
    status: RowStatus = "pending"
    error: Optional[str] = None


class BulkRowUpdate(BaseModel):
    """Partial edit of a row; only supplied fields are applied."""

    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    patient_nic: Optional[str] = None
    patient_email: Optional[str] = None
    patient_phone: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    slt_phone_number: Optional[str] = None
    employee_nic: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None


class BulkAppointmentPayload(BaseModel):
    """Wire shape of one row in the backend bulk-create request."""

    model_config = ConfigDict(populate_by_name=True)

    doctor_name: str = Field(alias="doctorName")
    patient_name: str = Field(alias="patientName")
    patient_nic: str = Field(alias="patientNIC")
    patient_email: str = Field(alias="patientEmail")
    patient_phone: str = Field(alias="patientPhone")
    payment_method: PaymentMethod = Field(alias="paymentMethod")
    slt_phone_number: Optional[str] = Field(default=None, alias="sltPhoneNumber")
    employee_nic: Optional[str] = Field(default=None, alias="employeeNIC")
    date: str
    time: str

    @classmethod
    def from_row(cls, row: BulkRow) -> "BulkAppointmentPayload":
        return cls(
            doctor_name=row.doctor_name.strip(),
            patient_name=row.patient_name.strip(),
            patient_nic=row.patient_nic.strip(),
            patient_email=row.patient_email.strip(),
            patient_phone=row.patient_phone.strip(),
            payment_method=row.payment_method,
            slt_phone_number=row.slt_phone_number.strip() or None,
            employee_nic=row.employee_nic.strip() or None,
            date=row.date.strip(),
            time=row.time.strip(),
        )


class CreatedAppointment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(validation_alias=AliasChoices("id", "appointmentId", "appointment_id"))


class FailedBooking(BaseModel):
    model_config = ConfigDict(extra="allow")

    reason: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("reason", "error", "message")
    )


class BatchSubmissionResult(BaseModel):
    """Created/failed split returned by the backend for one bulk submit."""

    created: List[CreatedAppointment] = Field(default_factory=list)
    failed: List[FailedBooking] = Field(default_factory=list)


class BatchView(BaseModel):
    rows: List[BulkRow]
    valid_count: int
    invalid_count: int
    pending_count: int
    estimated_total: float
    currency: str
    submitting: bool = False


class RejectedLine(BaseModel):
    line_number: int
    reason: str


class IngestionResult(BaseModel):
    imported: int
    skipped_lines: int
    rejected_lines: List[RejectedLine] = Field(default_factory=list)
    batch: BatchView
    notification: Notification


class ValidationSummary(BaseModel):
    valid: int
    invalid: int
    batch: BatchView
    notification: Notification


class SubmissionOutcome(BaseModel):
    status: Literal["success", "partial"]
    submitted: int
    created: int
    failed: int
    failed_rows: List[FailedBooking] = Field(default_factory=list)
    batch: BatchView
    notification: Notification


class BulkBookingOptions(BaseModel):
    doctors: List[str]
    time_slots: List[str]
    payment_methods: List[PaymentMethod]
    consultation_fee: float
    currency: str
