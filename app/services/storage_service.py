# app/services/storage_service.py
"""
사진 스토리지 클라이언트 (업로드는 클라이언트가 직접, 서버는 삭제만)

공개 URL 형식:
    {storage_url}/storage/v1/object/public/{bucket}/{path}
"""
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.config import settings
from app.core.logger import logger


class PhotoStorage:
    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        # 직접 만든 클라이언트만 close()에서 닫음
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=10.0)

    @property
    def public_prefix(self) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/"

    def storage_paths(self, urls: list[str]) -> list[str]:
        """공개 URL → 버킷 내부 경로 (다른 곳 URL은 무시)"""
        prefix = self.public_prefix
        return [url[len(prefix):] for url in urls if url.startswith(prefix)]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True
    )
    def remove(self, paths: list[str]) -> None:
        """경로 목록 일괄 삭제"""
        if not paths:
            return

        response = self._client.request(
            "DELETE",
            f"{self.base_url}/storage/v1/object/{self.bucket}",
            json={"prefixes": paths},
            headers={
                "Authorization": f"Bearer {self.service_key}",
                "apikey": self.service_key,
            }
        )
        response.raise_for_status()
        logger.debug(f"스토리지 삭제: {len(paths)}개 ({self.bucket})")

    def remove_urls(self, urls: list[str]) -> int:
        paths = self.storage_paths(urls)
        self.remove(paths)
        return len(paths)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def build_photo_storage() -> PhotoStorage | None:
    """설정이 없으면 None (blob 정리 생략)"""
    if not settings.storage_url:
        return None
    return PhotoStorage(
        base_url=settings.storage_url,
        service_key=settings.storage_service_key,
        bucket=settings.storage_bucket
    )
