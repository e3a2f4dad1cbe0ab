"""Validation and parsing of ``upload/{folder}/{file_name}`` storage keys."""

from __future__ import annotations

import re
from dataclasses import dataclass

VIRTUAL_PATH_ROOT = "upload/"
ALLOWED_EXTENSIONS = frozenset({"pdf", "jpg", "jpeg"})

VIRTUAL_PATH_RE = re.compile(
    r"upload/[A-Za-z0-9_\- ]+/[A-Za-z0-9_\- .@%]+\.(pdf|jpg|jpeg)",
    re.IGNORECASE,
)
_PARTS_RE = re.compile(r"upload/([^/\n]+)/([^/\n]+)\.([^./\n]+)")

MIME_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}


@dataclass(frozen=True)
class VirtualPathParts:
    folder: str
    file_stem: str
    extension: str

    @property
    def file_name(self) -> str:
        return f"{self.file_stem}.{self.extension}"


def validate_virtual_path(virtual_path: object) -> bool:
    if not isinstance(virtual_path, str):
        return False
    if not virtual_path.startswith(VIRTUAL_PATH_ROOT):
        return False
    if ".." in virtual_path:
        return False
    if "//" in virtual_path:
        return False
    return VIRTUAL_PATH_RE.fullmatch(virtual_path) is not None


def parse_virtual_path(virtual_path: str) -> VirtualPathParts | None:
    match = _PARTS_RE.fullmatch(virtual_path or "")
    if not match:
        return None
    return VirtualPathParts(folder=match.group(1), file_stem=match.group(2), extension=match.group(3))


def folder_prefix(virtual_path: str) -> str:
    """``upload/dept_events/7.pdf`` -> ``upload/dept_events/``."""
    head, _, _ = virtual_path.rpartition("/")
    return f"{head}/"


def folder_key(folder_name: str) -> str:
    """Normalize a folder name or folder path to its listing prefix."""
    folder = folder_name.strip("/")
    if not folder.startswith(VIRTUAL_PATH_ROOT):
        folder = f"{VIRTUAL_PATH_ROOT}{folder}"
    return f"{folder}/"


def file_name_of(virtual_path: str) -> str:
    return virtual_path.rsplit("/", 1)[-1]


def extension_of(name: str) -> str:
    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


def mime_type_for_extension(extension: str) -> str:
    return MIME_TYPES.get(extension.lower().lstrip("."), "application/octet-stream")
