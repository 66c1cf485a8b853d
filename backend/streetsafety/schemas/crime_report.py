from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from uuid import UUID
from datetime import datetime
from typing import Optional, List


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CrimeReportBase(CamelModel):
    type: str = Field(..., max_length=100)
    location: str = Field(..., max_length=255)
    address: str = Field(..., max_length=255)
    details: Optional[str] = None


class CrimeReportCreate(CrimeReportBase):
    # Geocoded from address/location when omitted
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class CrimeReportRead(CrimeReportBase):
    id: UUID
    latitude: float
    longitude: float
    severity: str
    upvotes: int = 0
    downvotes: int = 0
    upvoted_by: List[str] = []
    downvoted_by: List[str] = []
    created_at: datetime


class VoteRequest(CamelModel):
    user_email: Optional[str] = None


class AlreadyVotedResponse(CamelModel):
    message: str
    crime: CrimeReportRead


class NearestCrime(CamelModel):
    id: UUID
    type: str
    location: str
    address: str
    severity: str
    details: Optional[str] = None
    upvotes: int
    downvotes: int
    distance_km: float


class NearestCrimeSummary(CamelModel):
    found: bool
    message: str
    crime: Optional[NearestCrime] = None


class RadiusAlertRead(CamelModel):
    crime_id: UUID
    severity: str
    type: str
    address: str
    distance_m: float


class ProximityResponse(CamelModel):
    policy: str
    nearest: Optional[NearestCrimeSummary] = None
    alerts: Optional[List[RadiusAlertRead]] = None
