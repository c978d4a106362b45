"""Message schemas for the background analysis worker channel."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class WorkerErrorPayload(BaseModel):
    """Error raised inside the worker, flattened for transport."""

    name: str = "WorkerError"
    message: str
    stack: Optional[str] = None


class WorkerRequest(BaseModel):
    """Message from the caller to the worker.

    Attributes:
        id: Correlation id, echoed back in the response
        type: Always "request"
        payload: Calculation payload; must contain a "kind" key
    """

    id: str
    type: str = "request"
    payload: dict[str, Any] = Field(..., description="Payload with a 'kind' discriminator")


class WorkerResponse(BaseModel):
    """Message from the worker back to the caller.

    Either result or error is set. type echoes the payload kind on success
    and is "error" on failure.
    """

    id: str
    type: str
    result: Optional[Any] = None
    error: Optional[WorkerErrorPayload] = None
