"""
Applicant Router

Public endpoint applicants use to follow their application.

Endpoints:
- POST /applicant/status - Resolve status by phone number
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.database import get_db
from chenaniah.core.exceptions import ServiceError
from chenaniah.modules.applicants import service
from chenaniah.modules.applicants.schemas import StatusView
from chenaniah.modules.shared import PhoneRequest, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/status",
    response_model=StatusView,
    summary="Get Applicant Status",
    description="""
Look up an applicant by phone number.

Any phone format is accepted; records match on the last 8 digits.
Returns `is_applicant=false` when no submission or appointment matches.
""",
)
async def get_applicant_status(
    data: PhoneRequest,
    db: AsyncSession = Depends(get_db),
) -> StatusView:
    try:
        return await service.resolve_applicant_status(db, data.phone)
    except ServiceError as e:
        raise to_http_exception(e) from e
