import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from app.core.exceptions import ServiceError

from .dependencies import get_intake_service, get_query_service
from .schemas import ErrorResponse, RequestsResponse, StatsResponse, SubmitResponse
from .service import LeaveIntakeService, LeaveQueryService

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/leaves", tags=["leaves"])

ACTION_GET_REQUESTS = "getRequests"
ACTION_GET_STATS = "getStats"

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post(
    "",
    response_model=SubmitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def submit_leave_request(
    request: Request,
    service: LeaveIntakeService = Depends(get_intake_service),
):
    """Submit a leave request from the intake form (raw JSON object body)."""
    try:
        body = await request.body()
        result = await service.submit(body)
    except ServiceError as e:
        log.warning("Leave request rejected: %s", e.message)
        return _error(e.message, e.status_code)
    except Exception:
        log.exception("Unexpected error while submitting leave request")
        return _error(INTERNAL_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return SubmitResponse(message="Leave request submitted successfully", requestId=result.request_id)


@router.get(
    "",
    response_model=None,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def query_leave_requests(
    action: Optional[str] = Query(None),
    service: LeaveQueryService = Depends(get_query_service),
):
    """Admin view queries: action=getRequests (newest first) or action=getStats."""
    try:
        if action == ACTION_GET_REQUESTS:
            return RequestsResponse(requests=await service.list_requests())
        if action == ACTION_GET_STATS:
            return StatsResponse(stats=await service.compute_stats())
    except ServiceError as e:
        log.warning("Leave query %s failed: %s", action, e.message)
        return _error(e.message, e.status_code)
    except Exception:
        log.exception("Unexpected error in leave query %s", action)
        return _error(INTERNAL_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _error("Invalid action", status.HTTP_400_BAD_REQUEST)
