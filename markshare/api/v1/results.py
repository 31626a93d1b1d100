"""Rendering of OperationResult values as HTTP responses."""

from fastapi import status
from fastapi.responses import JSONResponse

from markshare.schemas.common import OperationResult

RESULT_STATUS_CODES = {
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "EXTERNAL_SERVICE_ERROR": status.HTTP_502_BAD_GATEWAY,
}


def result_status(result: OperationResult) -> int:
    if result.success:
        return status.HTTP_200_OK
    return RESULT_STATUS_CODES.get(result.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def result_response(result: OperationResult) -> JSONResponse:
    """Successful results render as 200; failures use the status mapped from their code."""
    return JSONResponse(
        status_code=result_status(result),
        content=result.model_dump(mode="json"),
    )
