from fastapi import APIRouter, HTTPException, status

from app.api.dependencies import AuthContextDep, MemoryServiceDep
from app.models.memory.requests import SetMemoryRequest
from app.models.memory.responses import (
    MemoryDeletedResponse,
    MemoryEntryResponse,
    MemoryListResponse,
)
from app.services.memory_service import MemoryLimitExceeded

router = APIRouter(
    prefix="/memory",
    tags=["memory"],
)


@router.get("", response_model=MemoryListResponse)
async def list_memory(
    context: AuthContextDep,
    memory_service: MemoryServiceDep,
) -> MemoryListResponse:
    entries = memory_service.list_entries(context.user_id)

    return MemoryListResponse(
        entries=[e.to_response() for e in entries],
        total_bytes=sum(e.size_bytes for e in entries),
        max_bytes=memory_service.max_bytes,
    )


@router.post("", response_model=MemoryEntryResponse)
async def set_memory(
    request_body: SetMemoryRequest,
    context: AuthContextDep,
    memory_service: MemoryServiceDep,
) -> MemoryEntryResponse:
    """Create or overwrite the value stored under a key"""
    try:
        entry = memory_service.set_entry(context.user_id, request_body.key, request_body.value)
    except MemoryLimitExceeded as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Memory size limit exceeded",
        ) from e

    return entry.to_response()


@router.delete("/{key}", response_model=MemoryDeletedResponse)
async def delete_memory(
    key: str,
    context: AuthContextDep,
    memory_service: MemoryServiceDep,
) -> MemoryDeletedResponse:
    if not memory_service.delete_entry(context.user_id, key):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Memory entry not found",
        )

    return MemoryDeletedResponse(message="Memory entry deleted successfully")


@router.delete("", response_model=MemoryDeletedResponse)
async def clear_memory(
    context: AuthContextDep,
    memory_service: MemoryServiceDep,
) -> MemoryDeletedResponse:
    memory_service.clear(context.user_id)
    return MemoryDeletedResponse(message="All memory cleared successfully")
