import logging
from urllib.parse import unquote, urlparse

from flask import current_app
from minio.commonconfig import CopySource
from minio.error import S3Error
from urllib3.exceptions import HTTPError
from werkzeug.utils import secure_filename

from postboard.extensions.minio_client import get_minio_client
from postboard.models.enums import Visibility


logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


def _bucket() -> str:
    return current_app.config["MINIO_BUCKET"]


def _object_base_url() -> str:
    base_url = current_app.config["MINIO_PUBLIC_BASE_URL"].rstrip("/")
    return f"{base_url}/{_bucket()}/"


def generate_final_key(user_id: int, post_id: int, file_name: str, visibility) -> str:
    """Permanent object key for one of a post's files.

    The same inputs always produce the same key, so the key (and its URL) can
    be recomputed later without asking the object store.
    """
    visibility = visibility or Visibility.PUBLIC
    if not isinstance(visibility, Visibility):
        visibility = Visibility[str(visibility).upper()]

    safe_name = secure_filename(file_name or "")
    if not safe_name:
        raise StorageError(f"Invalid file name: {file_name!r}")

    return f"posts/{visibility.value.lower()}/{user_id}/{post_id}/{safe_name}"


def build_object_url(object_name: str) -> str:
    return f"{_object_base_url()}{object_name}"


def extract_key_from_url(url: str | None) -> str | None:
    if not url:
        return None

    prefix = _object_base_url()
    if url.startswith(prefix):
        return url[len(prefix):] or None

    path = unquote(urlparse(url).path).lstrip("/")
    bucket_prefix = f"{_bucket()}/"
    if path.startswith(bucket_prefix):
        path = path[len(bucket_prefix):]
    return path or None


def is_temp_key(object_name: str) -> bool:
    return object_name.startswith(current_app.config["MEDIA_TEMP_PREFIX"])


def move_file_from_temp(temp_key: str, final_key: str) -> str:
    """Relocate an uploaded object out of the temporary area; returns its URL."""
    if not isinstance(temp_key, str) or not is_temp_key(temp_key):
        raise StorageError(f"Not a temporary upload: {temp_key!r}")

    minio = get_minio_client()
    bucket = _bucket()

    try:
        minio.copy_object(
            bucket_name=bucket,
            object_name=final_key,
            source=CopySource(bucket_name=bucket, object_name=temp_key),
        )
        minio.remove_object(bucket_name=bucket, object_name=temp_key)
    except S3Error as e:
        raise StorageError(f"Could not move {temp_key} to {final_key}: {e.code}") from e
    except HTTPError as e:
        raise StorageError(f"Could not move {temp_key} to {final_key}: {e}") from e

    return build_object_url(final_key)


def remove_objects(object_names) -> int:
    """Best-effort delete; returns how many objects were removed."""
    minio = get_minio_client()
    bucket = _bucket()

    removed = 0
    for object_name in object_names:
        try:
            minio.remove_object(bucket_name=bucket, object_name=object_name)
            removed += 1
        except Exception:
            logger.exception("Could not remove object %s", object_name)
    return removed
