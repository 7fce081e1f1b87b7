from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Payment(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    appointment_id: Optional[str] = Field(default=None, alias="appointmentId")
    patient_name: str = Field(default="", alias="patientName")
    doctor_name: str = Field(default="", alias="doctorName")
    hospital: str = ""
    amount: float
    method: str
    status: str
    transaction_id: str = Field(default="", alias="transactionId")
    date: str


class PaymentListRequest(BaseModel):
    status: str = "all"
    method: str = "all"
    search: str = ""
    sort_by: Literal["date", "amount"] = "date"
    order: Literal["asc", "desc"] = "desc"


class PaymentListResponse(BaseModel):
    total: int
    items: List[Payment]


class PaymentStatsResponse(BaseModel):
    stats: Dict[str, Any]
