import logging
import math
import posixpath

from flask import current_app

from postboard.db import db
from postboard.models.enums import Category, Tag, Visibility, parse_enum
from postboard.models.post_model import Post
from postboard.repositories import post_repository, user_repository
from postboard.repositories.image_repository import add_image
from postboard.schemas.post_schema import post_schema
from postboard.services import storage_service


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


class PostValidationError(ValueError):
    pass


class UserNotFoundError(LookupError):
    pass


class MediaProcessingError(Exception):
    pass


def _require_non_empty_string(value):
    return isinstance(value, str) and value.strip()


def _parse_choice(enum_cls, value):
    try:
        return parse_enum(enum_cls, value)
    except ValueError as e:
        raise PostValidationError(str(e)) from e


def _validate_files(files):
    max_files = int(current_app.config.get("MAX_POST_FILES", 10))
    if len(files) > max_files:
        raise PostValidationError(f"Maximum {max_files} files allowed")

    validated = []
    for entry in files:
        if not isinstance(entry, dict):
            raise PostValidationError("Invalid file entry")
        if not _require_non_empty_string(entry.get("s3Key")):
            raise PostValidationError("Invalid file entry")
        if not _require_non_empty_string(entry.get("fileName")):
            raise PostValidationError("Invalid file entry")

        description = entry.get("description")
        if description is not None and not isinstance(description, str):
            raise PostValidationError("File description must be a string")

        validated.append({
            "s3Key": entry["s3Key"].strip(),
            "fileName": entry["fileName"].strip(),
            "fileType": entry.get("fileType"),
            "description": description.strip() if description else None,
        })
    return validated


def _validate_tags(tags):
    if tags is None:
        return []
    if not isinstance(tags, list):
        raise PostValidationError("Tags must be a list")

    parsed = []
    for tag in tags:
        value = _parse_choice(Tag, tag)
        if value not in parsed:
            parsed.append(value)
    return parsed


def _validate_payload(data):
    title = data.get("title")
    description = data.get("description")
    category = data.get("category")
    files = data.get("files")

    if (
        not _require_non_empty_string(title)
        or not _require_non_empty_string(description)
        or not _require_non_empty_string(category)
        or not isinstance(files, list)
        or not files
    ):
        raise PostValidationError("Missing required fields")

    visibility = data.get("visibility")
    is_draft = data.get("isDraft")
    cover_image = data.get("coverImage")

    if is_draft is not None and not isinstance(is_draft, bool):
        raise PostValidationError("isDraft must be a boolean")
    if cover_image is not None and not isinstance(cover_image, str):
        raise PostValidationError("coverImage must be a string")

    return {
        "title": title.strip(),
        "description": description.strip(),
        "category": _parse_choice(Category, category),
        "tags": _validate_tags(data.get("tags")),
        "visibility": (
            _parse_choice(Visibility, visibility)
            if visibility is not None
            else Visibility.PUBLIC
        ),
        "is_draft": bool(is_draft),
        "cover_image": cover_image.strip() if cover_image else None,
        "files": _validate_files(files),
    }


def _basename(value: str) -> str:
    return posixpath.basename(value.rstrip("/")) if value else ""


def _resolve_cover_image(cover_hint, stored_files):
    """Pick the post's cover from the files that were actually relocated.

    A hint is matched on its last path segment, never as a substring, so
    similarly named files cannot collide.
    """
    if cover_hint:
        hint_key = storage_service.extract_key_from_url(cover_hint) or cover_hint
        hint_name = _basename(hint_key)

        for stored in stored_files:
            if cover_hint == stored["url"]:
                return stored["url"]
            if hint_name and hint_name in {_basename(stored["temp_key"]), stored["file_name"]}:
                return storage_service.build_object_url(stored["final_key"])

        logger.info("Cover image hint %s matched no stored file", cover_hint)

    if stored_files:
        return stored_files[0]["url"]
    return None


def _discard_post(post_id, moved_keys):
    if moved_keys:
        storage_service.remove_objects(moved_keys)

    try:
        post_repository.delete_post(post_id)
    except Exception:
        db.session.rollback()
        logger.exception("Could not delete post %s after failed file processing", post_id)


def _serialize_post(post, counts):
    payload = post_schema.dump(post)
    payload["counts"] = dict(counts.get(post.id) or {"likes": 0, "comments": 0})
    return payload


def create_post_with_files(email, data):
    payload = _validate_payload(data)

    user = user_repository.get_by_email(email)
    if not user:
        raise UserNotFoundError("User not found")
    user_id = user.id

    post = post_repository.create_post(
        user_id=user_id,
        title=payload["title"],
        description=payload["description"],
        category=payload["category"],
        tags=payload["tags"],
        visibility=payload["visibility"],
        is_draft=payload["is_draft"],
    )
    post_id = post.id

    moved_keys = []
    stored_files = []
    failed_files = []

    try:
        for file in payload["files"]:
            moved = False
            try:
                final_key = storage_service.generate_final_key(
                    user_id,
                    post_id,
                    file["fileName"],
                    payload["visibility"],
                )
                url = storage_service.move_file_from_temp(file["s3Key"], final_key)
                moved = True

                add_image(post_id=post_id, url=url, description=file["description"])
                db.session.commit()
            except Exception:
                db.session.rollback()
                logger.exception(
                    "Error processing file %s for post %s", file["fileName"], post_id
                )
                if moved:
                    storage_service.remove_objects([final_key])
                failed_files.append(file["fileName"])
                continue

            moved_keys.append(final_key)

            stored_files.append({
                "temp_key": file["s3Key"],
                "file_name": file["fileName"],
                "final_key": final_key,
                "url": url,
            })

        cover_image = _resolve_cover_image(payload["cover_image"], stored_files)
        post_repository.update_cover_image(post_id, cover_image)
    except Exception as e:
        db.session.rollback()
        logger.exception("File processing failed for post %s, removing it", post_id)
        _discard_post(post_id, moved_keys)
        raise MediaProcessingError("Failed to process uploaded files") from e

    post = post_repository.get_with_relations(post_id)
    counts = post_repository.count_engagement([post_id])

    logger.info(
        "Created post %s with %d/%d files",
        post_id,
        len(stored_files),
        len(payload["files"]),
    )
    return {
        "post": _serialize_post(post, counts),
        "failed_files": failed_files,
    }


def _normalize_paging(page, limit):
    if not isinstance(page, int) or page < 1:
        page = 1
    if not isinstance(limit, int) or limit < 1:
        limit = DEFAULT_PAGE_SIZE
    return page, min(limit, MAX_PAGE_SIZE)


def list_posts(
    viewer_email=None,
    page=None,
    limit=None,
    visibility=None,
    category=None,
    owner_id=None,
):
    page, limit = _normalize_paging(page, limit)

    conditions = [Post.is_draft.is_(False)]

    requested_visibility = None
    if visibility:
        requested_visibility = _parse_choice(Visibility, visibility)
    if category:
        conditions.append(Post.category == _parse_choice(Category, category))
    if owner_id is not None:
        conditions.append(Post.user_id == owner_id)

    viewer = user_repository.get_by_email(viewer_email) if viewer_email else None

    if viewer is None:
        conditions.append(Post.visibility == Visibility.PUBLIC)
    else:
        if requested_visibility is not None:
            conditions.append(Post.visibility == requested_visibility)
        # An explicit owner filter lists that owner's posts as requested.
        if owner_id is None:
            conditions.append(post_repository.visible_to(viewer.id))

    posts, total = post_repository.find_page(conditions, page, limit)
    counts = post_repository.count_engagement(post.id for post in posts)

    return {
        "posts": [_serialize_post(post, counts) for post in posts],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }
