import unittest
from unittest.mock import patch

from flask import Flask
from urllib3.exceptions import ProtocolError

from postboard.models.enums import Visibility
from postboard.services import storage_service
from postboard.services.storage_service import StorageError


class RecordingMinio:
    def __init__(self, fail_removal=()):
        self.calls = []
        self.fail_removal = set(fail_removal)

    def copy_object(self, bucket_name, object_name, source):
        self.calls.append(("copy", bucket_name, source.object_name, object_name))

    def remove_object(self, bucket_name, object_name):
        if object_name in self.fail_removal:
            raise RuntimeError("gone")
        self.calls.append(("remove", bucket_name, object_name))


class TestStorageService(unittest.TestCase):
    def setUp(self):
        self.app = Flask(__name__)
        self.app.config.update(
            MINIO_BUCKET="media",
            MINIO_PUBLIC_BASE_URL="https://storage.test/",
            MEDIA_TEMP_PREFIX="temp/",
        )
        self.ctx = self.app.app_context()
        self.ctx.push()

    def tearDown(self):
        self.ctx.pop()

    def test_final_key_is_deterministic(self):
        first = storage_service.generate_final_key(3, 7, "beach.jpg", Visibility.PUBLIC)
        second = storage_service.generate_final_key(3, 7, "beach.jpg", "public")

        self.assertEqual(first, "posts/public/3/7/beach.jpg")
        self.assertEqual(first, second)

    def test_final_key_depends_on_visibility(self):
        self.assertEqual(
            storage_service.generate_final_key(3, 7, "beach.jpg", Visibility.PRIVATE),
            "posts/private/3/7/beach.jpg",
        )
        self.assertEqual(
            storage_service.generate_final_key(3, 7, "beach.jpg", None),
            "posts/public/3/7/beach.jpg",
        )

    def test_final_key_sanitizes_file_name(self):
        key = storage_service.generate_final_key(1, 2, "../../etc/my photo.png", Visibility.PUBLIC)
        self.assertEqual(key, "posts/public/1/2/etc_my_photo.png")

        with self.assertRaises(StorageError):
            storage_service.generate_final_key(1, 2, "../..", Visibility.PUBLIC)

    def test_object_url_round_trips_through_key_extraction(self):
        url = storage_service.build_object_url("posts/public/1/2/a.jpg")

        self.assertEqual(url, "https://storage.test/media/posts/public/1/2/a.jpg")
        self.assertEqual(storage_service.extract_key_from_url(url), "posts/public/1/2/a.jpg")

    def test_extract_key_from_foreign_url_and_plain_key(self):
        self.assertEqual(
            storage_service.extract_key_from_url("http://other-host:9000/media/temp/u/x%20y.jpg"),
            "temp/u/x y.jpg",
        )
        self.assertEqual(storage_service.extract_key_from_url("temp/u/a.jpg"), "temp/u/a.jpg")
        self.assertIsNone(storage_service.extract_key_from_url(""))

    def test_move_copies_then_removes_source(self):
        minio = RecordingMinio()

        with patch("postboard.services.storage_service.get_minio_client", return_value=minio):
            url = storage_service.move_file_from_temp("temp/u/a.jpg", "posts/public/1/2/a.jpg")

        self.assertEqual(url, "https://storage.test/media/posts/public/1/2/a.jpg")
        self.assertEqual(minio.calls, [
            ("copy", "media", "temp/u/a.jpg", "posts/public/1/2/a.jpg"),
            ("remove", "media", "temp/u/a.jpg"),
        ])

    def test_move_rejects_keys_outside_temp_area(self):
        minio = RecordingMinio()

        with patch("postboard.services.storage_service.get_minio_client", return_value=minio):
            with self.assertRaises(StorageError):
                storage_service.move_file_from_temp("posts/public/9/9/a.jpg", "posts/public/1/2/a.jpg")

        self.assertEqual(minio.calls, [])

    def test_move_reports_transport_errors_as_storage_errors(self):
        class UnreachableMinio:
            def copy_object(self, bucket_name, object_name, source):
                raise ProtocolError("Connection aborted.")

        with patch(
            "postboard.services.storage_service.get_minio_client",
            return_value=UnreachableMinio(),
        ):
            with self.assertRaises(StorageError):
                storage_service.move_file_from_temp("temp/u/a.jpg", "posts/public/1/2/a.jpg")

    def test_remove_objects_is_best_effort(self):
        minio = RecordingMinio(fail_removal={"b"})

        with patch("postboard.services.storage_service.get_minio_client", return_value=minio):
            removed = storage_service.remove_objects(["a", "b", "c"])

        self.assertEqual(removed, 2)
        self.assertEqual(
            [call[2] for call in minio.calls],
            ["a", "c"],
        )


if __name__ == "__main__":
    unittest.main()
