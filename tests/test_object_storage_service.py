from __future__ import annotations

import pytest

from app.services import object_storage
from app.services.file_patterns import Pattern1Metadata, Pattern4Metadata
from app.services.object_storage import (
    NOT_CONFIGURED_MESSAGE,
    OBJECT_NOT_FOUND_MESSAGE,
    ObjectStorageError,
)
from tests.mocks import PDF_BYTES, FakeClientError, make_storage


def _paper(record_id: int = 69603, folder: str = "Paper_Presented") -> Pattern1Metadata:
    return Pattern1Metadata(user_id=1, record_id=record_id, folder_name=folder, file_extension=".pdf")


def test_upload_download_round_trip():
    storage, client = make_storage(folders=("Paper_Presented",))

    uploaded = storage.upload(PDF_BYTES, _paper())
    assert uploaded.success is True
    assert uploaded.virtual_path == "upload/Paper_Presented/1_69603.pdf"
    assert client.content_types[uploaded.virtual_path] == "application/pdf"
    assert client.metadata[uploaded.virtual_path]["patternType"] == "1"
    assert "uploadedAt" in client.metadata[uploaded.virtual_path]

    downloaded = storage.download(uploaded.virtual_path)
    assert downloaded.success is True
    assert downloaded.buffer == PDF_BYTES
    assert downloaded.content_type == "application/pdf"


def test_upload_to_missing_folder_never_writes():
    storage, client = make_storage(folders=("Profile",))

    result = storage.upload(PDF_BYTES, _paper(folder="Nonexistent_Folder"))

    assert result.success is False
    assert result.virtual_path == ""
    assert result.message == "Folder does not exist in S3: upload/Nonexistent_Folder/"
    assert client.operations("put_object") == []


def test_upload_overwrites_same_key():
    storage, client = make_storage(folders=("Paper_Presented",))
    storage.upload(b"%PDF-old", _paper())
    storage.upload(b"%PDF-new", _paper())
    assert client.objects["upload/Paper_Presented/1_69603.pdf"] == b"%PDF-new"


def test_upload_reports_client_failure():
    storage, client = make_storage(folders=("Paper_Presented",))
    client.fail_with["put_object"] = FakeClientError("AccessDenied", 403)

    result = storage.upload(PDF_BYTES, _paper())

    assert result.success is False
    assert result.message.startswith("Failed to upload file to S3")


def test_folder_check_is_idempotent_and_lists_one_key():
    storage, client = make_storage(folders=("Paper_Presented",))
    client.objects["upload/Paper_Presented/1_1.pdf"] = PDF_BYTES

    first = storage.check_folder_exists("Paper_Presented")
    second = storage.check_folder_exists("upload/Paper_Presented/")

    assert first.exists is True and second.exists is True
    assert first.message == "Folder exists in S3: upload/Paper_Presented/"
    assert client.operations("list_objects_v2") == [
        "upload/Paper_Presented/",
        "upload/Paper_Presented/",
    ]


def test_folder_check_error_is_flagged():
    storage, client = make_storage()
    client.fail_with["list_objects_v2"] = FakeClientError("AccessDenied", 403)

    result = storage.check_folder_exists("Paper_Presented")

    assert result.exists is False
    assert result.error is True
    assert result.message.startswith("Error checking folder existence")


def test_object_check_distinguishes_absent_from_error():
    storage, client = make_storage(folders=("Paper_Presented",))

    missing = storage.check_object_exists("upload/Paper_Presented/9_9.pdf")
    assert missing.exists is False
    assert missing.error is False
    assert missing.message == OBJECT_NOT_FOUND_MESSAGE

    client.fail_with["head_object"] = FakeClientError("AccessDenied", 403)
    failed = storage.check_object_exists("upload/Paper_Presented/9_9.pdf")
    assert failed.error is True


def test_signed_url_for_existing_object():
    storage, client = make_storage(folders=("Paper_Presented",))
    storage.upload(PDF_BYTES, _paper())

    result = storage.get_signed_url("upload/Paper_Presented/1_69603.pdf", expires_in=600)

    assert result.success is True
    assert "upload/Paper_Presented/1_69603.pdf" in result.url
    assert "X-Amz-Expires=600" in result.url


def test_signed_url_uses_default_expiry():
    storage, _ = make_storage(folders=("Paper_Presented",))
    storage.upload(PDF_BYTES, _paper())
    result = storage.get_signed_url("upload/Paper_Presented/1_69603.pdf")
    assert "X-Amz-Expires=3600" in result.url


def test_signed_url_for_missing_object_in_existing_folder():
    storage, client = make_storage(folders=("Paper_Presented",))

    result = storage.get_signed_url("upload/Paper_Presented/1_99999.pdf")

    assert result.success is False
    assert result.url == ""
    assert result.message == OBJECT_NOT_FOUND_MESSAGE
    assert client.operations("generate_presigned_url") == []


def test_signed_url_for_missing_folder_skips_object_probe():
    storage, client = make_storage()

    result = storage.get_signed_url("upload/Nonexistent_Folder/1_1.pdf")

    assert result.success is False
    assert result.message == "Folder does not exist in S3: upload/Nonexistent_Folder/"
    assert client.operations("head_object") == []


def test_delete_missing_object_in_existing_folder_succeeds():
    storage, client = make_storage(folders=("dept events",))
    client.objects["upload/dept events/7.pdf"] = PDF_BYTES

    first = storage.delete("upload/dept events/7.pdf")
    second = storage.delete("upload/dept events/7.pdf")

    assert first.success is True
    assert second.success is True
    assert "upload/dept events/7.pdf" not in client.objects


def test_delete_in_missing_folder_fails():
    storage, client = make_storage()

    result = storage.delete("upload/Nonexistent_Folder/7.pdf")

    assert result.success is False
    assert result.message == "Folder does not exist in S3: upload/Nonexistent_Folder/"
    assert client.operations("delete_object") == []


@pytest.mark.parametrize(
    "path",
    ["upload/../x/1.pdf", "files/a/1.pdf", "upload/a/1.exe", "upload/a/1_69603.pdf\n"],
)
def test_invalid_paths_are_rejected_before_any_call(path):
    storage, client = make_storage(folders=("a",))

    assert storage.download(path).message == "Invalid virtual path"
    assert storage.delete(path).message == "Invalid virtual path"
    assert storage.get_signed_url(path).message == "Invalid virtual path"
    assert client.calls == []


def test_download_missing_object():
    storage, _ = make_storage(folders=("Paper_Presented",))
    result = storage.download("upload/Paper_Presented/5_5.pdf")
    assert result.success is False
    assert result.buffer is None
    assert result.message == OBJECT_NOT_FOUND_MESSAGE


def test_not_configured_short_circuits():
    storage, client = make_storage(configured=False)
    metadata = Pattern4Metadata(record_id=1, folder_name="dept events", file_extension=".pdf")

    assert storage.upload(PDF_BYTES, metadata).message == NOT_CONFIGURED_MESSAGE
    assert storage.download("upload/dept events/1.pdf").message == NOT_CONFIGURED_MESSAGE
    assert storage.delete("upload/dept events/1.pdf").message == NOT_CONFIGURED_MESSAGE
    assert storage.get_signed_url("upload/dept events/1.pdf").message == NOT_CONFIGURED_MESSAGE
    probe = storage.check_folder_exists("dept events")
    assert probe.exists is False and probe.error is True
    assert client.calls == []


def test_ensure_folder_creates_marker_once():
    storage, client = make_storage()

    assert storage.ensure_folder("Journal_Paper") is True
    assert storage.ensure_folder("Journal_Paper") is False
    assert client.operations("put_object") == ["upload/Journal_Paper/"]


def test_ensure_folder_raises_when_probe_fails():
    storage, client = make_storage()
    client.fail_with["list_objects_v2"] = FakeClientError("AccessDenied", 403)
    with pytest.raises(ObjectStorageError):
        storage.ensure_folder("Journal_Paper")


def test_module_wrappers_use_shared_instance(monkeypatch):
    storage, _ = make_storage(folders=("Paper_Presented",))
    monkeypatch.setattr(object_storage, "get_s3_storage", lambda: storage)

    uploaded = object_storage.upload_to_s3(PDF_BYTES, _paper())
    assert uploaded.success is True
    assert object_storage.check_s3_folder_exists("Paper_Presented").exists is True
    assert object_storage.check_s3_object_exists(uploaded.virtual_path).exists is True
    assert object_storage.download_from_s3(uploaded.virtual_path).buffer == PDF_BYTES
    assert object_storage.get_signed_url(uploaded.virtual_path).success is True
    assert object_storage.delete_from_s3(uploaded.virtual_path).success is True
    assert object_storage.check_s3_object_exists(uploaded.virtual_path).exists is False


def test_pattern4_upload_to_empty_folder_is_rejected():
    storage, client = make_storage(folders=("Paper_Presented",))
    metadata = Pattern4Metadata(record_id=7, folder_name="dept_events", file_extension=".pdf")

    result = storage.upload(PDF_BYTES, metadata)

    assert result.success is False
    assert "Folder does not exist" in result.message
    assert "upload/dept_events/" in result.message
    assert client.operations("put_object") == []
