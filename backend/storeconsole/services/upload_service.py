# Overview: Image upload proxy; validates the file and forwards it to the image host.

"""
Upload Service

Forwards product/category images to Cloudinary using an unsigned upload
preset. Validation happens before any network call:

- no file            -> 400 "No file provided"
- non-image mimetype -> 400
- over max size      -> 400 (413 when the request body passes MAX_CONTENT_LENGTH)

Host failures keep the host's status code. A timeout answers 408.
"""
from __future__ import annotations

from dataclasses import dataclass

import httpx
from flask import current_app

from ..errors import ConsoleError, ValidationError


CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class UploadError(ConsoleError):
    """Image host rejected or did not answer the upload."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class UploadResult:
    url: str
    public_id: str

    def to_dict(self) -> dict:
        return {"success": True, "url": self.url, "public_id": self.public_id}


def build_client(timeout: float) -> httpx.Client:
    """HTTP client for the image host. Tests replace this with a mock transport."""
    return httpx.Client(timeout=timeout)


def validate_upload(file_storage) -> bytes:
    """Return the file body after the type and size checks."""
    if file_storage is None or not file_storage.filename:
        raise ValidationError("No file provided", field="file")

    mimetype = (file_storage.mimetype or "").lower()
    if not mimetype.startswith("image/"):
        raise ValidationError("Invalid file type. Please upload an image.", field="file")

    max_bytes = current_app.config["UPLOAD_MAX_BYTES"]
    # One byte past the limit is enough to reject
    body = file_storage.read(max_bytes + 1)
    if len(body) > max_bytes:
        raise ValidationError(too_large_message(), field="file")
    return body


def too_large_message() -> str:
    max_mb = current_app.config["UPLOAD_MAX_BYTES"] // (1024 * 1024)
    return f"File too large. Maximum size is {max_mb}MB."


def _host_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"Upload failed with status {response.status_code}"
    if not isinstance(data, dict):
        return f"Upload failed with status {response.status_code}"
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(data.get("message") or "Upload failed")


def upload_image(file_storage) -> UploadResult:
    """Validate and forward one image. Raises ValidationError or UploadError."""
    body = validate_upload(file_storage)
    config = current_app.config

    url = CLOUDINARY_UPLOAD_URL.format(cloud_name=config["CLOUDINARY_CLOUD_NAME"])
    form = {
        "upload_preset": config["CLOUDINARY_UPLOAD_PRESET"],
        "folder": config["CLOUDINARY_FOLDER"],
    }
    files = {"file": (file_storage.filename, body, file_storage.mimetype)}

    current_app.logger.info(
        "Uploading image name=%s size=%d type=%s", file_storage.filename, len(body), file_storage.mimetype
    )

    try:
        with build_client(config["UPLOAD_TIMEOUT_SECONDS"]) as client:
            response = client.post(url, data=form, files=files)
    except httpx.TimeoutException:
        current_app.logger.warning("Image upload timed out name=%s", file_storage.filename)
        raise UploadError("Upload timeout. Please try again.", 408)
    except httpx.HTTPError:
        current_app.logger.exception("Failed to upload image name=%s", file_storage.filename)
        raise UploadError("Image upload failed. Please try again.", 500)

    if response.status_code >= 400:
        message = _host_error_message(response)
        current_app.logger.error("Image host rejected upload status=%d: %s", response.status_code, message)
        raise UploadError(message, response.status_code)

    data = response.json()
    current_app.logger.info("Upload successful: %s", data.get("secure_url"))
    return UploadResult(url=data.get("secure_url"), public_id=data.get("public_id"))
