from app.services.document_urls import (
    DUMMY_DOCUMENT_URL,
    extract_file_name_from_url,
    get_file_extension,
    is_department_folder,
    is_temp_local_path,
    is_virtual_s3_path,
    upload_document_to_s3,
    upload_multiple_documents,
)
from tests.mocks import FakeClientError, PDF_BYTES


def test_path_classification():
    assert is_temp_local_path("/uploaded-document/document_1_ab.pdf") is True
    assert is_temp_local_path("upload/Profile/a.jpg") is False
    assert is_temp_local_path(None) is False
    assert is_virtual_s3_path("upload/Profile/a.jpg") is True
    assert is_virtual_s3_path("https://example.com/a.pdf") is False


def test_url_helpers():
    assert extract_file_name_from_url("/uploaded-document/1_1234567890.pdf") == "1_1234567890.pdf"
    assert extract_file_name_from_url("/elsewhere/x.pdf") is None
    assert get_file_extension("scan.jpeg") == ".jpeg"
    assert get_file_extension("noext") == ".pdf"


def test_department_folders():
    assert is_department_folder("dept events") is True
    assert is_department_folder("Dept Student Body Events") is True
    assert is_department_folder("visitors other") is True
    assert is_department_folder("Paper_Presented") is False


def test_upload_document_uses_pattern1(storage, s3_client, temp_storage):
    staged = temp_storage.save("paper.pdf", "application/pdf", PDF_BYTES)

    result = upload_document_to_s3(
        storage, temp_storage, staged.url, user_id=1, record_id=69603, folder_name="Paper_Presented"
    )

    assert result == "upload/Paper_Presented/1_69603.pdf"
    assert s3_client.objects[result] == PDF_BYTES
    assert temp_storage.exists(staged.file_name) is False


def test_upload_document_department_folder_uses_pattern4(storage, temp_storage):
    staged = temp_storage.save("event.pdf", "application/pdf", PDF_BYTES)

    result = upload_document_to_s3(
        storage, temp_storage, staged.url, user_id=1, record_id=7, folder_name="dept events"
    )

    assert result == "upload/dept events/7.pdf"


def test_upload_document_passthrough_and_dummy(storage, temp_storage):
    assert upload_document_to_s3(storage, temp_storage, None, 1, 2, "Paper_Presented") == DUMMY_DOCUMENT_URL
    existing = "upload/Paper_Presented/1_2.pdf"
    assert upload_document_to_s3(storage, temp_storage, existing, 1, 2, "Paper_Presented") == existing


def test_upload_document_falls_back_on_failure(storage, s3_client, temp_storage):
    staged = temp_storage.save("paper.pdf", "application/pdf", PDF_BYTES)
    s3_client.fail_with["put_object"] = FakeClientError("AccessDenied", 403)

    result = upload_document_to_s3(
        storage, temp_storage, staged.url, user_id=1, record_id=5, folder_name="Paper_Presented"
    )

    assert result == DUMMY_DOCUMENT_URL
    assert temp_storage.exists(staged.file_name) is False


def test_upload_document_missing_staged_file(storage, temp_storage):
    result = upload_document_to_s3(
        storage,
        temp_storage,
        "/uploaded-document/document_1_gone.pdf",
        user_id=1,
        record_id=5,
        folder_name="Paper_Presented",
    )
    assert result == DUMMY_DOCUMENT_URL


def test_upload_multiple_documents_settles_each_item(storage, temp_storage):
    good = temp_storage.save("a.pdf", "application/pdf", PDF_BYTES)
    wrong_folder = temp_storage.save("b.pdf", "application/pdf", PDF_BYTES)

    outcomes = upload_multiple_documents(
        storage,
        temp_storage,
        [
            {"file_name": good.file_name, "user_id": 1, "record_id": 10, "folder_name": "Paper_Presented"},
            {"file_name": wrong_folder.file_name, "user_id": 1, "record_id": 11, "folder_name": "Missing"},
            {"file_name": "document_1_gone.pdf", "user_id": 1, "record_id": 12, "folder_name": "Paper_Presented"},
            {"file_name": "c.pdf", "user_id": None, "record_id": 13, "folder_name": "Paper_Presented"},
        ],
    )

    assert [outcome.success for outcome in outcomes] == [True, False, False, False]
    assert outcomes[0].virtual_path == "upload/Paper_Presented/1_10.pdf"
    assert outcomes[1].error == "Folder does not exist in S3: upload/Missing/"
    assert outcomes[3].error == "Pattern 1 requires user_id"
    assert temp_storage.exists(good.file_name) is False
    assert temp_storage.exists(wrong_folder.file_name) is False
