import pytest

from app.services.virtual_path import (
    extension_of,
    file_name_of,
    folder_key,
    folder_prefix,
    mime_type_for_extension,
    parse_virtual_path,
    validate_virtual_path,
)


@pytest.mark.parametrize(
    "path",
    [
        "upload/Paper_Presented/1_69603.pdf",
        "upload/Profile/a.b@uni.edu.jpg",
        "upload/online_info/_42_0.PDF",
        "upload/dept events/7.jpeg",
        "upload/Qualitative_Matrix/9_Qualitative Matrix.pdf",
    ],
)
def test_valid_paths(path):
    assert validate_virtual_path(path) is True


@pytest.mark.parametrize(
    "path",
    [
        "",
        None,
        123,
        "uploads/Paper_Presented/1_2.pdf",
        "upload/../secrets/1_2.pdf",
        "upload//1_2.pdf",
        "upload/Paper_Presented/1_2.png",
        "upload/Paper_Presented/nested/1_2.pdf",
        "upload/Paper_Presented/",
        "/upload/Paper_Presented/1_2.pdf",
        "upload/Paper_Presented/1_69603.pdf\n",
        "upload/Paper\nPresented/1_2.pdf",
        "upload/Paper_Presented/1_2\t.pdf",
    ],
)
def test_invalid_paths(path):
    assert validate_virtual_path(path) is False


def test_parse_virtual_path():
    parts = parse_virtual_path("upload/Paper_Presented/1_69603.pdf")
    assert parts is not None
    assert parts.folder == "Paper_Presented"
    assert parts.file_stem == "1_69603"
    assert parts.extension == "pdf"
    assert parts.file_name == "1_69603.pdf"
    assert parse_virtual_path("not-a-path") is None
    assert parse_virtual_path("upload/Paper_Presented/1_69603.pdf\n") is None


def test_folder_prefix_and_key():
    assert folder_prefix("upload/dept events/7.pdf") == "upload/dept events/"
    assert folder_key("Paper_Presented") == "upload/Paper_Presented/"
    assert folder_key("/Paper_Presented/") == "upload/Paper_Presented/"
    assert folder_key("upload/Paper_Presented/") == "upload/Paper_Presented/"
    assert folder_key("uploads_archive") == "upload/uploads_archive/"


def test_name_helpers():
    assert file_name_of("upload/Profile/a@b.jpg") == "a@b.jpg"
    assert extension_of("report.PDF") == "pdf"
    assert extension_of("noext") == ""
    assert mime_type_for_extension(".jpg") == "image/jpeg"
    assert mime_type_for_extension("pdf") == "application/pdf"
    assert mime_type_for_extension("bin") == "application/octet-stream"


def test_generated_paths_always_validate():
    from app.services.file_patterns import build_pattern_metadata, generate_virtual_path

    fields = {
        "user_id": 12,
        "record_id": 345,
        "email": "first.last@uni.edu",
        "metric_name": "citations",
        "file_num": 0,
    }
    for pattern_type in range(1, 7):
        for extension in ("pdf", ".jpg", ".jpeg"):
            metadata = build_pattern_metadata(
                pattern_type, folder_name="Journal_Paper", file_extension=extension, **fields
            )
            assert validate_virtual_path(generate_virtual_path(metadata)) is True
