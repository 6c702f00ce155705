import json
import mimetypes
import sys
from pathlib import Path

# Ensure project root is on sys.path when running this script directly
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import argparse

from src.asset_engine import AttachmentFile, AttachmentWorkingSet, format_file_size, user_message
from src.asset_engine.attachments import DOCX_MIME, PDF_MIME, PPTX_MIME, TEXT_MIME

_SUFFIX_TYPES = {
    ".pdf": PDF_MIME,
    ".txt": TEXT_MIME,
    ".pptx": PPTX_MIME,
    ".docx": DOCX_MIME,
}


def _attachment_for(path: Path) -> AttachmentFile:
    mime = _SUFFIX_TYPES.get(path.suffix.lower()) or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    stat = path.stat()
    return AttachmentFile(
        name=path.name,
        size_bytes=stat.st_size,
        mime_type=mime,
        last_modified=int(stat.st_mtime * 1000),
    )


def main():
    parser = argparse.ArgumentParser(
        description="Check which supporting documents would be admitted, one batch per argument group"
    )
    parser.add_argument("batches", nargs="+", help="Comma-separated file paths; each argument is one selection batch")
    args = parser.parse_args()

    working_set = AttachmentWorkingSet()
    for batch in args.batches:
        paths = [Path(p) for p in batch.split(",") if p]
        missing = [str(p) for p in paths if not p.is_file()]
        if missing:
            print(f"File(s) not found: {', '.join(missing)}")
            raise SystemExit(1)
        result = working_set.add([_attachment_for(p) for p in paths])
        title, description = user_message(result)
        print(json.dumps({
            "batch": [p.name for p in paths],
            "accepted": [f.name for f in result.accepted],
            "rejected": [f.name for f in result.rejected],
            "reason": result.reason.value if result.reason else None,
            "message": f"{title}: {description}",
        }))

    print(f"Working set ({len(working_set)}):")
    for f in working_set.files:
        print(f"  {f.name}  |  {format_file_size(f.size_bytes)}  |  {f.mime_type}")


if __name__ == "__main__":
    main()
