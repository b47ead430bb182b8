"""스토리지 서비스 — 증빙 이미지/영상 업로드 제공자.

Storage Service — Upload provider for evidence images and videos.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
Uploads go to S3 when credentials are configured and to a local directory
otherwise. Both calls return the hosted URL, or None when the upload failed.
Calls are blocking; workflows run them in the threadpool.
"""

import logging
import shutil
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Callable

from botocore.exceptions import BotoCoreError, ClientError

from unisew.config import settings

logger = logging.getLogger(__name__)

# 로컬 업로드 디렉토리 — .env의 LOCAL_UPLOADS_DIR 또는 프로젝트 루트의 uploads/
_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
UPLOADS_DIR: Path = Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"

# 로컬 모드 복사 단위 — Chunk size for local copies (drives progress callbacks)
_CHUNK_SIZE: int = 256 * 1024

ProgressCallback = Callable[[int], None]


@dataclass
class StagedFile:
    """업로드 대기 파일 (File handed to the upload provider).

    Attributes:
        filename: 원본 파일 이름 (Original file name)
        content_type: MIME 타입 (MIME type)
        size: 바이트 크기 (Size in bytes)
        stream: 읽기 가능한 바이너리 스트림 (Readable binary stream)
    """

    filename: str
    content_type: str
    size: int
    stream: BinaryIO


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None
        self.uploads_dir: Path = UPLOADS_DIR

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def _generate_key(self, filename: str, folder: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{folder}/{date_prefix}/{uuid.uuid4().hex}.{ext}"

    def _public_url(self, key: str) -> str:
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/{key}"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/{key}"

    def _save_local(self, key: str, stream: BinaryIO, on_progress: ProgressCallback | None) -> None:
        path = self.uploads_dir / key
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as out:
            if on_progress is None:
                shutil.copyfileobj(stream, out)
                return
            while True:
                chunk = stream.read(_CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
                on_progress(len(chunk))

    def upload(
        self,
        file: StagedFile,
        folder: str,
        on_progress: ProgressCallback | None = None,
    ) -> str | None:
        """파일을 업로드하고 공개 URL을 반환합니다. 실패 시 None.

        Upload one file and return its public URL, or None on failure.
        ``on_progress`` receives the byte count of each transferred chunk.
        """
        key = self._generate_key(file.filename, folder)
        try:
            if self.is_local:
                self._save_local(key, file.stream, on_progress)
            else:
                self.client.upload_fileobj(
                    file.stream,
                    settings.AWS_S3_BUCKET,
                    key,
                    ExtraArgs={"ContentType": file.content_type},
                    Callback=on_progress,
                )
        except (BotoCoreError, ClientError, OSError) as exc:
            logger.warning("Upload of %s failed: %s", file.filename, exc)
            return None

        logger.info("Uploaded %s (%d bytes) to %s", file.filename, file.size, key)
        return self._public_url(key)

    def upload_image(self, file: StagedFile) -> str | None:
        return self.upload(file, folder="evidence/images")

    def upload_video(self, file: StagedFile, on_progress: ProgressCallback | None = None) -> str | None:
        """영상 업로드 — 바이트 단위 진행률 보고 (Byte-level progress)."""
        return self.upload(file, folder="evidence/videos", on_progress=on_progress)


storage_service: StorageService = StorageService()
