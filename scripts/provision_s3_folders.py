"""Create ``upload/{folder}/`` markers so uploads into those folders are accepted."""

import argparse
import sys

from app.services.object_storage import ObjectStorageError, get_s3_storage

DEFAULT_FOLDERS = [
    "Profile",
    "online_info",
    "Paper_Presented",
    "Journal_Paper",
    "Book_Pub",
    "dept events",
    "dept student academic activities",
    "dept student body events",
    "visitors dept",
    "visitors other",
]


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Provision S3 upload folders.")
    parser.add_argument(
        "folders",
        nargs="*",
        help="Folder names under upload/ (defaults to the standard set).",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report which folders exist; create nothing.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    storage = get_s3_storage()
    if not storage.configured:
        print("S3 is not configured; set AWS_KEY, AWS_SECRET, AWS_REGION, AWS_BUCKET_NAME.")
        return 1

    failures = 0
    for folder in args.folders or DEFAULT_FOLDERS:
        if args.check:
            probe = storage.check_folder_exists(folder)
            print(f"{folder}: {probe.message}")
            failures += 0 if probe.exists else 1
            continue
        try:
            created = storage.ensure_folder(folder)
        except ObjectStorageError as exc:
            print(f"{folder}: failed ({exc})")
            failures += 1
            continue
        print(f"{folder}: {'created' if created else 'exists'}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
