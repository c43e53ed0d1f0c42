"""Upload API: accept one multipart file and store it under the uploads root."""
# No postponed annotations here: the rate-limit decorator wraps the endpoint
# and FastAPI must still resolve its parameter types.
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from printdesk.api.dependencies import get_file_service
from printdesk.api.schemas.orders import error_responses
from printdesk.config.storage import DEFAULT_UPLOAD_RATE_LIMIT
from printdesk.core.exceptions import UploadError
from printdesk.services import FileService
from printdesk.stores.types import StoredFile

router = APIRouter(tags=["files"])
limiter = Limiter(key_func=get_remote_address)

# Set from StorageConfig.upload_rate_limit by create_app; read per request
_upload_limit = {"value": DEFAULT_UPLOAD_RATE_LIMIT}


def set_upload_rate_limit(value: str) -> None:
    _upload_limit["value"] = value


def upload_rate_limit() -> str:
    return _upload_limit["value"]


@router.post("/upload", response_model=StoredFile, responses=error_responses(400, 429, 500))
@limiter.limit(upload_rate_limit)
def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None),
    svc: FileService = Depends(get_file_service),
):
    """Multipart field ``file``. Missing → 400, larger than the configured ceiling → 500."""
    if file is None:
        raise UploadError("No file uploaded")
    # One byte past the ceiling is enough to reject without buffering the rest
    data = file.file.read(svc.max_bytes + 1)
    return svc.save_file(data, file.filename, file.content_type)
