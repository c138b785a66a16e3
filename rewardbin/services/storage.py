"""
Image storage service using Cloudinary
"""

import cloudinary
import cloudinary.uploader
from typing import Optional, Dict, Any
import asyncio
import logging

from rewardbin.core.config import Settings
from rewardbin.core.exceptions import BadRequestException

logger = logging.getLogger(__name__)


def is_data_url(value: Optional[str]) -> bool:
    """True for inline base64 images such as data:image/png;base64,..."""
    return bool(value) and value.startswith("data:image/")


class StorageService:
    """Storage service for image uploads"""

    def __init__(self, settings: Settings):
        self.settings = settings
        if settings.cloudinary_configured:
            cloudinary.config(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
                secure=True,
            )

    async def upload_image(
        self,
        data: str,
        public_id: str,
        folder: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Upload image to Cloudinary

        Args:
            data: Data URL or remote URL of the image
            public_id: Public ID to store the image under
            folder: Cloudinary folder

        Returns:
            Upload result with URL
        """
        if not self.settings.cloudinary_configured:
            raise BadRequestException("Image uploads are not configured")

        try:
            # Run in thread pool
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                None,
                self._upload_image_sync,
                data,
                public_id,
                folder or self.settings.COUPON_IMAGE_FOLDER,
            )
        except Exception as e:
            logger.error(f"Failed to upload image: {str(e)}")
            raise

    def _upload_image_sync(self, data: str, public_id: str, folder: str) -> Dict[str, Any]:
        result = cloudinary.uploader.upload(
            data,
            public_id=public_id,
            folder=folder,
            overwrite=True,
            resource_type="image",
        )

        return {
            "url": result["secure_url"],
            "public_id": result["public_id"],
            "width": result.get("width"),
            "height": result.get("height"),
            "format": result.get("format"),
        }

    async def delete_image(self, public_id: str, folder: Optional[str] = None) -> bool:
        """Delete image from Cloudinary"""
        if not self.settings.cloudinary_configured:
            return False

        full_id = f"{folder or self.settings.COUPON_IMAGE_FOLDER}/{public_id}"
        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(
                None,
                cloudinary.uploader.destroy,
                full_id
            )
            return result.get("result") == "ok"
        except Exception as e:
            logger.error(f"Failed to delete image: {str(e)}")
            return False
