from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class Doctor(BaseModel):
    id: Optional[str] = None
    name: str
    specialty: str
    hospital: str
    fee: float
    rating: Optional[float] = None


class DoctorSearchRequest(BaseModel):
    query: str = Field("", description="Fragment of the doctor's name or specialty")
    specialty: str = Field("all", description="Exact specialty or 'all'")
    hospital: str = Field("all", description="Exact hospital or 'all'")


class DoctorSearchResponse(BaseModel):
    total: int
    items: List[Doctor]
    source: Literal["backend", "fallback", "mock"]
