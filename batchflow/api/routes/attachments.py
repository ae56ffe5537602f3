"""Attachment endpoints shared by batches and purchase orders."""

from fastapi import APIRouter, Depends, Response, status

from batchflow.api.dependencies import get_registry
from batchflow.application.dto.responses import ErrorResponse
from batchflow.core.services import BatchRegistry

router = APIRouter(prefix="/api/attachments", tags=["attachments"])


@router.delete(
    "/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def remove_attachment(
    attachment_id: str,
    registry: BatchRegistry = Depends(get_registry),
) -> Response:
    await registry.remove_attachment(attachment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
