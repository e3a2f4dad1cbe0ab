"""Deterministic file naming for S3 virtual paths.

Every stored document is addressed by ``upload/{folder}/{file_name}`` where the
file name is derived from the identifying fields of the record it belongs to.
Six naming patterns exist, one per kind of record:

    1  {user_id}_{record_id}{ext}                  publications, research, awards
    2  {email}{ext}                                profile images
    3  _{record_id}_{file_num}{ext}                multi-file online info
    4  {record_id}{ext}                            department-level records
    5  {user_id}_{record_id}_{metric_name}{ext}    per-metric documents
    6  {user_id}_{folder_name}{ext}                qualitative matrix documents
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


class FilePatternError(ValueError):
    """Pattern metadata cannot produce a file name."""


class InvalidPatternError(FilePatternError):
    """Pattern type outside 1-6."""

    def __init__(self, pattern_type: object):
        self.pattern_type = pattern_type
        super().__init__(f"Invalid pattern type: {pattern_type}")


class MissingFieldError(FilePatternError):
    """A field required by the chosen pattern is absent."""

    def __init__(self, pattern_type: int, field: str):
        self.pattern_type = pattern_type
        self.field = field
        super().__init__(f"Pattern {pattern_type} requires {field}")


def _normalize_extension(extension: str) -> str:
    return extension if extension.startswith(".") else f".{extension}"


@dataclass(frozen=True)
class _PatternBase:
    pattern_type: ClassVar[int] = 0
    required_fields: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        for name in self.required_fields + ("folder_name", "file_extension"):
            if self._is_missing(name, getattr(self, name)):
                raise MissingFieldError(self.pattern_type, name)
        object.__setattr__(
            self, "file_extension", _normalize_extension(self.file_extension)
        )

    def _is_missing(self, name: str, value: object) -> bool:
        return value is None or value == "" or value == 0

    @property
    def extension(self) -> str:
        return self.file_extension


@dataclass(frozen=True)
class Pattern1Metadata(_PatternBase):
    user_id: int
    record_id: int
    folder_name: str
    file_extension: str

    pattern_type: ClassVar[int] = 1
    required_fields: ClassVar[tuple[str, ...]] = ("user_id", "record_id")


@dataclass(frozen=True)
class Pattern2Metadata(_PatternBase):
    email: str
    folder_name: str
    file_extension: str

    pattern_type: ClassVar[int] = 2
    required_fields: ClassVar[tuple[str, ...]] = ("email",)


@dataclass(frozen=True)
class Pattern3Metadata(_PatternBase):
    record_id: int
    file_num: int
    folder_name: str
    file_extension: str

    pattern_type: ClassVar[int] = 3
    required_fields: ClassVar[tuple[str, ...]] = ("record_id", "file_num")

    def _is_missing(self, name: str, value: object) -> bool:
        # file numbering may start at zero
        if name == "file_num":
            return value is None
        return super()._is_missing(name, value)


@dataclass(frozen=True)
class Pattern4Metadata(_PatternBase):
    record_id: int
    folder_name: str
    file_extension: str

    pattern_type: ClassVar[int] = 4
    required_fields: ClassVar[tuple[str, ...]] = ("record_id",)


@dataclass(frozen=True)
class Pattern5Metadata(_PatternBase):
    user_id: int
    record_id: int
    metric_name: str
    folder_name: str
    file_extension: str

    pattern_type: ClassVar[int] = 5
    required_fields: ClassVar[tuple[str, ...]] = ("user_id", "record_id", "metric_name")


@dataclass(frozen=True)
class Pattern6Metadata(_PatternBase):
    user_id: int
    folder_name: str
    file_extension: str

    pattern_type: ClassVar[int] = 6
    required_fields: ClassVar[tuple[str, ...]] = ("user_id",)


FilePatternMetadata = Union[
    Pattern1Metadata,
    Pattern2Metadata,
    Pattern3Metadata,
    Pattern4Metadata,
    Pattern5Metadata,
    Pattern6Metadata,
]

PATTERN_TYPES: dict[int, type[_PatternBase]] = {
    cls.pattern_type: cls
    for cls in (
        Pattern1Metadata,
        Pattern2Metadata,
        Pattern3Metadata,
        Pattern4Metadata,
        Pattern5Metadata,
        Pattern6Metadata,
    )
}


def build_pattern_metadata(
    pattern_type: object,
    *,
    folder_name: str | None,
    file_extension: str | None,
    user_id: int | None = None,
    record_id: int | None = None,
    email: str | None = None,
    metric_name: str | None = None,
    file_num: int | None = None,
) -> FilePatternMetadata:
    """Select the variant for ``pattern_type`` and populate it from request fields.

    Fields the variant does not use are ignored.
    """
    if isinstance(pattern_type, bool) or pattern_type not in PATTERN_TYPES:
        raise InvalidPatternError(pattern_type)
    available = {
        "user_id": user_id,
        "record_id": record_id,
        "email": email,
        "metric_name": metric_name,
        "file_num": file_num,
        "folder_name": folder_name,
        "file_extension": file_extension,
    }
    cls = PATTERN_TYPES[pattern_type]
    kwargs = {name: available[name] for name in cls.__dataclass_fields__}
    return cls(**kwargs)  # type: ignore[return-value]


def generate_file_name(metadata: FilePatternMetadata) -> str:
    ext = metadata.extension
    if isinstance(metadata, Pattern1Metadata):
        return f"{metadata.user_id}_{metadata.record_id}{ext}"
    if isinstance(metadata, Pattern2Metadata):
        return f"{metadata.email}{ext}"
    if isinstance(metadata, Pattern3Metadata):
        return f"_{metadata.record_id}_{metadata.file_num}{ext}"
    if isinstance(metadata, Pattern4Metadata):
        return f"{metadata.record_id}{ext}"
    if isinstance(metadata, Pattern5Metadata):
        return f"{metadata.user_id}_{metadata.record_id}_{metadata.metric_name}{ext}"
    if isinstance(metadata, Pattern6Metadata):
        return f"{metadata.user_id}_{metadata.folder_name}{ext}"
    raise InvalidPatternError(getattr(metadata, "pattern_type", metadata))


def sanitize_folder_name(folder_name: str) -> str:
    return folder_name.replace("..", "").strip("/")


def generate_virtual_path(metadata: FilePatternMetadata) -> str:
    """Build the S3 key, e.g. ``upload/Paper_Presented/1_69603.pdf``."""
    file_name = generate_file_name(metadata)
    return f"upload/{sanitize_folder_name(metadata.folder_name)}/{file_name}"
