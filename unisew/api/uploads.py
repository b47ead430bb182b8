"""로컬 업로드 파일 제공 라우터.

Local Upload Router — Serves files saved by the local upload provider at
the ``PUBLIC_BASE_URL/uploads/<key>`` URLs it hands out. In S3 mode the
URLs point at the bucket and nothing is served here.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from unisew.services.storage_service import storage_service
from unisew.utils.exceptions import NotFoundError

router: APIRouter = APIRouter()


@router.get("/{key:path}")
async def serve_upload(key: str) -> FileResponse:
    if not storage_service.is_local:
        raise NotFoundError("File not found")

    root = storage_service.uploads_dir.resolve()
    path = (root / key).resolve()
    # 업로드 디렉토리 밖은 거부 — Keys may not leave the uploads directory
    if not path.is_relative_to(root) or not path.is_file():
        raise NotFoundError("File not found")
    return FileResponse(path)
