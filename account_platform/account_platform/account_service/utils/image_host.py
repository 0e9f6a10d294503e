"""
Image hosting client used to publish profile images.
"""
import logging
import os
from typing import Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


class ImageHost:
    """
    Uploads a local file to the configured image host.

    The host is expected to accept a multipart ``file`` field and answer with
    JSON containing ``secure_url`` or ``url``. The local file is removed after
    every attempt, successful or not.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 30.0):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout

    def upload(self, local_path: Optional[str]) -> Optional[dict]:
        if not local_path:
            return None
        if not self.base_url:
            logger.warning("[Upload] IMAGE_HOST_URL is not configured, skipping %s", local_path)
            remove_local_file(local_path)
            return None

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            with open(local_path, "rb") as fh:
                response = httpx.post(
                    self.base_url,
                    files={"file": (os.path.basename(local_path), fh)},
                    headers=headers,
                    timeout=self.timeout,
                )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.warning("[Upload] Image upload failed for %s: %s", local_path, e)
            return None
        finally:
            remove_local_file(local_path)

        url = body.get("secure_url") or body.get("url")
        if not url:
            logger.warning("[Upload] Image host response for %s carried no url", local_path)
            return None

        logger.info("[Upload] Image uploaded: %s", url)
        return {"url": url}


def remove_local_file(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("[Upload] Could not remove temporary file %s: %s", path, e)


def get_image_host() -> ImageHost:
    return ImageHost(
        settings.IMAGE_HOST_URL,
        api_key=settings.IMAGE_HOST_API_KEY,
        timeout=settings.IMAGE_HOST_TIMEOUT_SECONDS,
    )
