# Overview: Flask API route for image uploads; proxies multipart files to the image host.

from flask import Blueprint, request, current_app
from werkzeug.exceptions import RequestEntityTooLarge

from ..decorators import require_auth
from ..errors import ConsoleError, error_response
from ..services import upload_service

uploads_bp = Blueprint("uploads", __name__, url_prefix="/api/uploads")


@uploads_bp.post("/image")
@require_auth
def upload_image_route():
    """
    Multipart form with a single `file` field.

    Returns {"success": true, "url", "public_id"} or {"error"}.
    """
    try:
        result = upload_service.upload_image(request.files.get("file"))
    except RequestEntityTooLarge:
        return {"error": upload_service.too_large_message()}, 413
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to upload image")
        return {"error": "Image upload failed. Please try again."}, 500

    return result.to_dict()
