"""
Image conversion utility for converting images to WebP format.
Reduces file size before uploading to Cloudinary.
"""
import io
import logging
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_WEBP_QUALITY = 85  # Balance between quality and file size (0-100)
DEFAULT_WEBP_METHOD = 6    # Compression method (0-6, higher = better compression but slower)
MAX_DIMENSION = 3840       # Maximum width or height before downscaling


def convert_to_webp(
    image_bytes: bytes,
    quality: int = DEFAULT_WEBP_QUALITY,
    method: int = DEFAULT_WEBP_METHOD,
    max_dimension: Optional[int] = MAX_DIMENSION,
    skip_if_webp: bool = True
) -> Tuple[bytes, bool]:
    """
    Convert image bytes to WebP format to reduce file size.

    Args:
        image_bytes: Original image file bytes
        quality: WebP quality (0-100, default: 85)
        method: WebP compression method (0-6, default: 6)
        max_dimension: Maximum width or height before downscaling (None to disable)
        skip_if_webp: If True, return original bytes if already WebP format

    Returns:
        Tuple[bytes, bool]:
            - Converted image bytes (or original if skipped/failed)
            - Whether conversion was successful/skipped (True) or failed (False)
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))

        if skip_if_webp and image.format == 'WEBP':
            logger.debug("Image is already WebP format, skipping conversion")
            return image_bytes, True

        # WebP supports transparency, so palette images keep their alpha channel
        if image.mode == 'P':
            image = image.convert('RGBA')
        elif image.mode not in ('RGB', 'RGBA', 'LA'):
            image = image.convert('RGB')

        if max_dimension:
            width, height = image.size
            if width > max_dimension or height > max_dimension:
                image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
                logger.info(
                    f"Downscaled image from {width}x{height} to {image.size[0]}x{image.size[1]} "
                    f"(max dimension: {max_dimension})"
                )

        webp_buffer = io.BytesIO()
        save_kwargs = {
            'format': 'WEBP',
            'quality': quality,
            'method': method,
        }
        if quality == 100:
            save_kwargs['lossless'] = True

        image.save(webp_buffer, **save_kwargs)
        webp_bytes = webp_buffer.getvalue()

        original_size = len(image_bytes)
        converted_size = len(webp_bytes)
        reduction = ((original_size - converted_size) / original_size) * 100
        logger.info(
            f"Converted image to WebP: {original_size:,} bytes -> {converted_size:,} bytes "
            f"({reduction:.1f}% reduction, quality={quality})"
        )

        return webp_bytes, True

    except UnidentifiedImageError as e:
        logger.warning(f"Cannot identify image format: {str(e)}")
        return image_bytes, False

    except Exception as e:
        logger.error(f"Error converting image to WebP: {str(e)}", exc_info=True)
        return image_bytes, False
