import logging

from flask import Blueprint, request, jsonify

from postboard.services.post_service import (
    MediaProcessingError,
    PostValidationError,
    UserNotFoundError,
    create_post_with_files,
    list_posts,
)
from postboard.services.session_service import (
    resolve_session_email,
    resolve_viewer_email,
)


logger = logging.getLogger(__name__)

post_bp = Blueprint("posts", __name__)


@post_bp.route("/posts", methods=["POST"])
def create_post():
    email = resolve_session_email()
    if not email:
        return jsonify({"error": "Unauthorized"}), 401

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON body"}), 400

    try:
        result = create_post_with_files(email, data)
    except PostValidationError as e:
        return jsonify({"error": str(e)}), 400
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except MediaProcessingError as e:
        return jsonify({"error": str(e)}), 500
    except Exception:
        logger.exception("Post creation error")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Post created successfully",
        "post": result["post"],
        "failed_files": result["failed_files"],
    }), 200


@post_bp.route("/posts", methods=["GET"])
def get_posts():
    page = request.args.get("page", default=1, type=int)
    limit = request.args.get("limit", default=10, type=int)
    visibility = request.args.get("visibility") or None
    category = request.args.get("category") or None

    owner_id = request.args.get("userId") or None
    if owner_id is not None:
        try:
            owner_id = int(owner_id)
        except ValueError:
            return jsonify({"error": "Invalid userId"}), 400

    email = resolve_viewer_email()

    try:
        data = list_posts(
            viewer_email=email,
            page=page,
            limit=limit,
            visibility=visibility,
            category=category,
            owner_id=owner_id,
        )
    except PostValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        logger.exception("Posts fetch error")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(data), 200
