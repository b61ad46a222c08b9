"""Translation of baton-server errors into HTTP error responses."""

from fastapi import HTTPException, status

from baton_server.errors import (
    AgentCallError,
    BatonError,
    NotFoundError,
    ReasoningError,
    WorkflowDefinitionError,
    WorkflowStateError,
)


def status_code_for(error: BatonError) -> int:
    """Map an error class to its HTTP status code."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, WorkflowDefinitionError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, (AgentCallError, ReasoningError)):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(error, WorkflowStateError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def http_error(error: BatonError) -> HTTPException:
    """Build the structured HTTPException for an error.

    The payload has the shape {"error": {"code", "message", "details"}}.
    """
    return HTTPException(
        status_code=status_code_for(error),
        detail={
            "error": {
                "code": error.code,
                "message": error.message,
                "details": error.details(),
            }
        },
    )
