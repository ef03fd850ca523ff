from datetime import datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, Field

AppointmentStatus = Literal["Requested", "Confirmed", "Cancelled"]


class BusinessHours(BaseModel):
    day_of_week: int = Field(ge=0, le=6, description="0=Sunday .. 6=Saturday")
    open_time: time
    close_time: time
    is_open: bool = True


class Location(BaseModel):
    address: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)


class ServiceProvider(BaseModel):
    id: int
    owner_id: str
    name: str
    description: str = ""
    phone_number: str = ""
    location: Location


class Offering(BaseModel):
    provider_id: int
    service_id: int
    name: str
    description: str = ""
    duration_minutes: int
    price: float
    is_available: bool = True


class ServiceProviderDetails(BaseModel):
    provider: ServiceProvider
    business_hours: list[BusinessHours]
    services: list[Offering]


class ServiceProviderCreateRequest(BaseModel):
    owner_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    phone_number: str = Field(pattern=r"^\+?[0-9]\d{1,14}$")
    location: Location
    business_hours: list[BusinessHours] = Field(default_factory=list)


class ServiceProviderUpdateRequest(BaseModel):
    actor_user_id: str
    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    phone_number: Optional[str] = Field(default=None, pattern=r"^\+?[0-9]\d{1,14}$")


class BusinessHoursUpdateRequest(BaseModel):
    actor_user_id: str
    business_hours: list[BusinessHours]


class OfferingCreateRequest(BaseModel):
    actor_user_id: str
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    price: float = Field(gt=0)
    duration_minutes: int = Field(gt=0)


class OfferingUpdateRequest(BaseModel):
    actor_user_id: str
    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    price: Optional[float] = Field(default=None, gt=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)


class ActorRequest(BaseModel):
    actor_user_id: str


class OfferingAvailability(BaseModel):
    provider_id: int
    service_id: int
    is_available: bool


class SearchServiceResult(BaseModel):
    service_id: int
    name: str
    duration_minutes: int
    price: float
    is_available: bool
    provider_id: int
    provider_name: str


class TimeRange(BaseModel):
    start: datetime
    end: datetime


class AvailableTime(BaseModel):
    start: datetime
    end: datetime
    label: str


class TimeAvailability(BaseModel):
    provider_id: int
    service_id: int
    start: datetime
    end: datetime
    available: bool


class AppointmentCreateRequest(BaseModel):
    customer_id: str = Field(min_length=1)
    provider_id: int = Field(gt=0)
    service_id: int = Field(gt=0)
    start_time: datetime
    notes: str = Field(default="", max_length=500)


class Appointment(BaseModel):
    id: Optional[int] = None
    provider_id: int
    service_id: int
    customer_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = "Requested"
    notes: str = ""


class AppointmentView(Appointment):
    service_name: str
    provider_name: str


class AppointmentStatusUpdateRequest(BaseModel):
    actor_user_id: str
    status: AppointmentStatus
