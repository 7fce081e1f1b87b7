from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from agent_portal.schemas.common import Notification

AppointmentTab = Literal["upcoming", "completed", "cancelled"]


class Appointment(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    doctor_name: str = Field(alias="doctorName")
    patient_name: str = Field(alias="patientName")
    patient_email: Optional[str] = Field(default=None, alias="patientEmail")
    patient_phone: Optional[str] = Field(default=None, alias="patientPhone")
    hospital: str = ""
    specialty: Optional[str] = None
    date: str
    time: str
    status: Literal["confirmed", "pending", "cancelled", "completed"]
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")
    amount: Optional[float] = None


class AppointmentFilter(BaseModel):
    search: str = ""
    doctor: str = "all"
    hospital: str = "all"
    tab: AppointmentTab = "upcoming"


class AppointmentListResponse(BaseModel):
    total: int
    items: List[Appointment]


class CancelRequest(BaseModel):
    reason: str = ""


class QueueUpdateResponse(BaseModel):
    """Outcome of a confirm/cancel action on the pending-confirmation queue."""

    appointment_id: str
    action: Literal["confirmed", "cancelled"]
    remaining: List[Appointment]
    reconciled: bool
    notification: Notification
