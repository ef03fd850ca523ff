from typing import Optional

from fastapi import APIRouter, Query, Response, status

from booking.models import (
    ActorRequest,
    BusinessHours,
    BusinessHoursUpdateRequest,
    Offering,
    OfferingAvailability,
    OfferingCreateRequest,
    OfferingUpdateRequest,
    ServiceProvider,
    ServiceProviderCreateRequest,
    ServiceProviderDetails,
    ServiceProviderUpdateRequest,
)
from booking.routers.http_errors import raise_scheduling_http_error
from booking.services.errors import SchedulingError
from booking.services.schedule_store import schedule_store

router = APIRouter(tags=["providers"])


@router.post("", response_model=ServiceProviderDetails, status_code=status.HTTP_201_CREATED)
def create_provider(request: ServiceProviderCreateRequest):
    try:
        return schedule_store.create_provider(
            owner_id=request.owner_id,
            name=request.name,
            description=request.description,
            phone_number=request.phone_number,
            location=request.location,
            business_hours=request.business_hours,
        )
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.get("", response_model=list[ServiceProvider])
def list_providers(
    city: Optional[str] = Query(default=None),
    owner_id: Optional[str] = Query(default=None),
):
    return schedule_store.list_providers(city=city, owner_id=owner_id)


@router.get("/{provider_id}", response_model=ServiceProviderDetails)
def provider_details(provider_id: int):
    try:
        return schedule_store.get_provider_details(provider_id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.put("/{provider_id}", response_model=ServiceProvider)
def update_provider(provider_id: int, request: ServiceProviderUpdateRequest):
    try:
        return schedule_store.update_provider(
            provider_id=provider_id,
            actor_user_id=request.actor_user_id,
            name=request.name,
            description=request.description,
            phone_number=request.phone_number,
        )
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.put("/{provider_id}/business-hours", response_model=list[BusinessHours])
def replace_business_hours(provider_id: int, request: BusinessHoursUpdateRequest):
    try:
        return schedule_store.replace_business_hours(
            provider_id=provider_id,
            actor_user_id=request.actor_user_id,
            business_hours=request.business_hours,
        )
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.delete("/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_provider(provider_id: int, actor_user_id: str = Query(...)):
    try:
        schedule_store.delete_provider(provider_id=provider_id, actor_user_id=actor_user_id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{provider_id}/services", response_model=Offering, status_code=status.HTTP_201_CREATED)
def add_offering(provider_id: int, request: OfferingCreateRequest):
    try:
        return schedule_store.add_offering(
            provider_id=provider_id,
            actor_user_id=request.actor_user_id,
            name=request.name,
            description=request.description,
            price=request.price,
            duration_minutes=request.duration_minutes,
        )
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.get("/{provider_id}/services", response_model=list[Offering])
def list_offerings(provider_id: int):
    try:
        return schedule_store.list_offerings(provider_id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.get("/{provider_id}/services/{service_id}", response_model=Offering)
def get_offering(provider_id: int, service_id: int):
    try:
        return schedule_store.require_offering(provider_id, service_id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.put("/{provider_id}/services/{service_id}", response_model=Offering)
def update_offering(provider_id: int, service_id: int, request: OfferingUpdateRequest):
    try:
        return schedule_store.update_offering(
            provider_id=provider_id,
            service_id=service_id,
            actor_user_id=request.actor_user_id,
            name=request.name,
            description=request.description,
            price=request.price,
            duration_minutes=request.duration_minutes,
        )
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.post("/{provider_id}/services/{service_id}/availability", response_model=OfferingAvailability)
def toggle_offering_availability(provider_id: int, service_id: int, request: ActorRequest):
    try:
        offering = schedule_store.toggle_offering_availability(
            provider_id=provider_id,
            service_id=service_id,
            actor_user_id=request.actor_user_id,
        )
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)
    return OfferingAvailability(
        provider_id=offering.provider_id,
        service_id=offering.service_id,
        is_available=offering.is_available,
    )


@router.delete("/{provider_id}/services/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_offering(provider_id: int, service_id: int, actor_user_id: str = Query(...)):
    try:
        schedule_store.delete_offering(provider_id=provider_id, service_id=service_id, actor_user_id=actor_user_id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
