"""
Spools uploaded files to the local upload directory before they are handed
to the image host.
"""
import os
import shutil
import uuid
from typing import Optional

from fastapi import UploadFile

from ..config import settings


def save_upload(upload: Optional[UploadFile], upload_dir: Optional[str] = None) -> Optional[str]:
    """Write ``upload`` to disk and return its local path, or None if nothing was sent."""
    if upload is None or not upload.filename:
        return None

    upload_dir = upload_dir or settings.UPLOAD_DIR
    os.makedirs(upload_dir, exist_ok=True)

    # Client-supplied names are reduced to their basename and prefixed to avoid collisions
    name = f"{uuid.uuid4().hex}_{os.path.basename(upload.filename)}"
    path = os.path.join(upload_dir, name)
    with open(path, "wb") as out:
        shutil.copyfileobj(upload.file, out)
    return path
