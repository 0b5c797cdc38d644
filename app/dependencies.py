from typing import Annotated

from fastapi import Depends, Request

from app.services.availability import AvailabilityService
from app.services.rescheduling import ReschedulingService


def get_availability_service(request: Request) -> AvailabilityService:
    return request.app.state.availability_service


def get_rescheduling_service(request: Request) -> ReschedulingService:
    return request.app.state.rescheduling_service


AvailabilityDep = Annotated[AvailabilityService, Depends(get_availability_service)]
ReschedulingDep = Annotated[ReschedulingService, Depends(get_rescheduling_service)]
