"""
Image upload endpoint.
Converts images to WebP and uploads them to Cloudinary; the returned URL is
then attached to a hero, about-us, service or portfolio record.
"""
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from cloudinary.exceptions import Error as CloudinaryError
from typing import Optional
import asyncio
import logging
import re

from studio_cms.schemas import UploadResponse
from studio_cms.services.cloudinary_service import MediaHost, get_media_host
from studio_cms.utils.image_converter import convert_to_webp
from studio_cms.utils.jwt_auth import verify_cms_token
from studio_cms.utils.rate_limit import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms/uploads", dependencies=[Depends(verify_cms_token)])

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*$")


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["upload"])
async def upload_cms_image(
    request: Request,
    file: UploadFile = File(...),
    folder: Optional[str] = Form(None),
    media: MediaHost = Depends(get_media_host),
):
    """
    Upload one image to Cloudinary.

    Args:
        file: JPEG, PNG, WebP or GIF image, at most 5MB
        folder: Optional Cloudinary folder (default: CLOUDINARY_UPLOAD_FOLDER)

    Returns:
        UploadResponse: Delivery URL, resource key and dimensions

    Raises:
        HTTPException: 400 for invalid files, 502 if Cloudinary rejects the upload
    """
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid file type", "detail": "The file must be a JPEG, PNG, WebP or GIF image"}
        )
    if folder and not FOLDER_PATTERN.match(folder):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid folder", "detail": f"'{folder}' is not a valid folder name"}
        )

    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "File too large", "detail": "The image must not exceed 5MB"}
        )

    converted, converted_ok = await asyncio.to_thread(convert_to_webp, content)
    if converted_ok and len(converted) < len(content):
        content = converted
    elif not converted_ok:
        logger.warning(f"WebP conversion failed for {file.filename}, uploading original format")

    try:
        result = await media.upload_image(content, folder=folder)
    except CloudinaryError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Upload failed", "detail": str(e)}
        )

    return UploadResponse(
        url=result["url"],
        resource_key=result["resource_key"],
        width=result["width"],
        height=result["height"],
    )
