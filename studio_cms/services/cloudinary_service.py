"""
Cloudinary service for image upload and deletion.

Uploads go through the Cloudinary SDK. Deletions are signed destroy requests
sent with httpx so many of them can run concurrently; they are best-effort
cleanup and never raise to the caller.
"""
import cloudinary
import cloudinary.uploader
import cloudinary.utils
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import Request
import asyncio
import httpx
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from studio_cms.config import Settings
from studio_cms.utils.resource_key import extract_resource_key

logger = logging.getLogger(__name__)

# Destroy answers that mean the asset no longer exists
DELETED_RESULTS = ("ok", "not found")


class MediaHost:
    """
    Handle to one Cloudinary account.
    Created once at startup and shared by every request (see get_media_host).
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        api_base: str = "https://api.cloudinary.com",
        upload_folder: str = "photography",
        concurrency: int = 8,
        timeout: float = 15.0,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.api_base = api_base.rstrip("/")
        self.upload_folder = upload_folder
        self.concurrency = max(1, concurrency)
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "MediaHost":
        options = dict(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            api_base=settings.CLOUDINARY_API_BASE,
            upload_folder=settings.CLOUDINARY_UPLOAD_FOLDER,
            concurrency=settings.CLOUDINARY_DELETE_CONCURRENCY,
            timeout=settings.CLOUDINARY_TIMEOUT_SECONDS,
            max_retries=settings.CLOUDINARY_MAX_RETRIES,
            retry_backoff=settings.CLOUDINARY_RETRY_BACKOFF_SECONDS,
        )
        options.update(overrides)
        return cls(**options)

    @property
    def destroy_url(self) -> str:
        return f"{self.api_base}/v1_1/{self.cloud_name}/image/destroy"

    def validate_config(self) -> bool:
        """
        Validate that Cloudinary is properly configured.

        Returns:
            bool: True if Cloudinary is configured, False otherwise
        """
        if not self.cloud_name:
            logger.warning("CLOUDINARY_CLOUD_NAME not configured")
            return False
        if not self.api_key:
            logger.warning("CLOUDINARY_API_KEY not configured")
            return False
        if not self.api_secret:
            logger.warning("CLOUDINARY_API_SECRET not configured")
            return False
        return True

    def sign(self, resource_key: str, timestamp: int) -> str:
        """SHA-1 signature over public_id=<key>&timestamp=<ts><secret>."""
        return cloudinary.utils.api_sign_request(
            {"public_id": resource_key, "timestamp": timestamp},
            self.api_secret,
        )

    async def upload_image(
        self,
        file: Any,
        folder: Optional[str] = None,
        public_id: Optional[str] = None,
        max_retries: int = 3
    ) -> Dict[str, Any]:
        """
        Upload image to Cloudinary with automatic optimization and retry logic.

        Args:
            file: File object, file path, or bytes to upload
            folder: Cloudinary folder path (default: CLOUDINARY_UPLOAD_FOLDER)
            public_id: Optional custom public ID for the image
            max_retries: Maximum number of retry attempts for transient failures

        Returns:
            dict: Upload result containing url, resource_key, format, width,
            height and bytes

        Raises:
            CloudinaryError: If upload fails after all retries
        """
        for attempt in range(max_retries):
            try:
                # The SDK call is blocking; keep it off the event loop
                result = await asyncio.to_thread(
                    cloudinary.uploader.upload,
                    file,
                    folder=folder or self.upload_folder,
                    public_id=public_id,
                    cloud_name=self.cloud_name,
                    api_key=self.api_key,
                    api_secret=self.api_secret,
                    secure=True,
                    fetch_format="auto",
                    quality="auto",
                    transformation=[{"width": 2560, "height": 2560, "crop": "limit"}],
                )

                logger.info(f"Successfully uploaded image: {result['public_id']}")

                return {
                    "url": result["secure_url"],
                    "resource_key": result["public_id"],
                    "format": result.get("format"),
                    "width": result.get("width"),
                    "height": result.get("height"),
                    "bytes": result.get("bytes"),
                }

            except CloudinaryError as e:
                logger.warning(f"Cloudinary upload error (attempt {attempt + 1}/{max_retries}): {str(e)}")

                if attempt < max_retries - 1:
                    await asyncio.sleep(self.retry_backoff * 2 ** attempt)
                    continue

                logger.error(f"Cloudinary upload failed after {max_retries} attempts: {str(e)}")
                raise

    async def delete_asset(self, resource_key: str) -> bool:
        """
        Delete one asset from Cloudinary.

        Args:
            resource_key: Cloudinary public_id of the asset

        Returns:
            bool: True if the asset is gone, False on any failure (never raises)
        """
        if not resource_key:
            return False
        if not self.validate_config():
            logger.warning(f"Cloudinary not configured, skipping deletion of {resource_key}")
            return False

        try:
            return await self._destroy(resource_key)
        except Exception as e:
            logger.error(f"Unexpected error deleting {resource_key} from Cloudinary: {str(e)}", exc_info=True)
            return False

    async def _destroy(self, resource_key: str) -> bool:
        for attempt in range(self.max_retries):
            timestamp = int(time.time())
            payload = {
                "public_id": resource_key,
                "timestamp": str(timestamp),
                "signature": self.sign(resource_key, timestamp),
                "api_key": self.api_key,
            }
            retryable = False

            try:
                response = await self._client.post(self.destroy_url, data=payload)
            except httpx.HTTPError as e:
                logger.warning(
                    f"Cloudinary delete error (attempt {attempt + 1}/{self.max_retries}) "
                    f"for {resource_key}: {type(e).__name__}: {str(e)}"
                )
                retryable = True
            else:
                if response.status_code >= 500:
                    logger.warning(
                        f"Cloudinary delete returned {response.status_code} "
                        f"(attempt {attempt + 1}/{self.max_retries}) for {resource_key}"
                    )
                    retryable = True
                elif response.status_code >= 400:
                    logger.error(
                        f"Cloudinary rejected deletion of {resource_key}: "
                        f"{response.status_code} {response.text}"
                    )
                    return False
                else:
                    result = _result_of(response)
                    if result in DELETED_RESULTS:
                        logger.info(f"Deleted image from Cloudinary: {resource_key} (result: {result})")
                        return True
                    logger.warning(f"Unexpected Cloudinary delete result for {resource_key}: {response.text}")
                    return False

            if retryable and attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_backoff * 2 ** attempt)

        logger.error(f"Cloudinary delete failed after {self.max_retries} attempts for {resource_key}")
        return False

    async def delete_many_assets(self, resource_keys: Iterable[str]) -> int:
        """
        Delete several assets concurrently. Failures are logged, not raised.

        Returns:
            int: Number of assets successfully deleted
        """
        keys = [key for key in resource_keys if key]
        if not keys:
            return 0

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _bounded_delete(key: str) -> bool:
            async with semaphore:
                return await self.delete_asset(key)

        results = await asyncio.gather(*(_bounded_delete(key) for key in keys), return_exceptions=True)

        deleted = 0
        for key, result in zip(keys, results):
            if isinstance(result, BaseException):
                logger.error(f"Cloudinary deletion task for {key} failed: {result!r}")
            elif result:
                deleted += 1

        if deleted < len(keys):
            logger.warning(f"Partial Cloudinary cleanup: {deleted} of {len(keys)} asset(s) deleted")
        return deleted

    async def delete_urls(self, urls: Iterable[Optional[str]]) -> int:
        """
        Resolve delivery URLs to resource keys and delete them.
        Unparseable URLs are skipped; duplicate keys are deleted once.
        """
        return await self.delete_many_assets(resource_keys(urls))

    async def aclose(self) -> None:
        await self._client.aclose()


def resource_keys(urls: Iterable[Optional[str]]) -> List[str]:
    """Unique resource keys of the given URLs, in first-seen order."""
    keys = []
    for url in urls:
        if not url:
            continue
        key = extract_resource_key(url)
        if key is None:
            logger.warning(f"Could not extract resource key from URL, skipping deletion: {url}")
            continue
        if key not in keys:
            keys.append(key)
    return keys


def _result_of(response: httpx.Response) -> Optional[str]:
    try:
        return response.json().get("result")
    except ValueError:
        return None


def get_media_host(request: Request) -> MediaHost:
    """FastAPI dependency returning the MediaHost created at startup."""
    return request.app.state.media_host
