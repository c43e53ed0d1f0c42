"""Files API: list uploaded files, look one up, delete them all, download."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from printdesk.api.dependencies import get_file_service
from printdesk.api.schemas.orders import MessageResponse, error_responses
from printdesk.core.exceptions import NotFoundError
from printdesk.services import FileService
from printdesk.services.file_service import URL_PREFIX

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/files", tags=["files"], responses=error_responses(500))
downloads_router = APIRouter(tags=["files"])


@router.get("", responses=error_responses(404))
def get_files(
    path: Optional[str] = None,
    svc: FileService = Depends(get_file_service),
):
    """Metadata of one file (``?path=``) or of every uploaded file."""
    if path:
        info = svc.get_file(path)
        if info is None:
            raise NotFoundError("File not found", details={"path": path})
        return info
    return svc.list_files()


@router.delete("", response_model=MessageResponse)
def delete_all_files(svc: FileService = Depends(get_file_service)):
    removed = svc.delete_all_files()
    logger.info("delete_all_files: removed %d files", removed)
    return MessageResponse(message="All files deleted")


@downloads_router.get(URL_PREFIX + "{name}", responses=error_responses(404))
def download_file(
    name: str,
    svc: FileService = Depends(get_file_service),
):
    target = svc.resolve_path(name)
    if target is None:
        raise NotFoundError("File not found", details={"path": name})
    return FileResponse(target, filename=target.name)
