from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import ErrorKind
from .models import AdmissionResult, AttachmentFile, UploadRejection

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
TEXT_MIME = "text/plain"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_MIME_TYPES = frozenset({PDF_MIME, TEXT_MIME, PPTX_MIME, DOCX_MIME})

MAX_IMAGE_UPLOAD_BYTES = 5 * 1024 * 1024

_USER_MESSAGES = {
    ErrorKind.UNSUPPORTED_TYPE: ("Invalid file type", "Please upload only PDF, TXT, PPTX, or DOCX files"),
    ErrorKind.DUPLICATE_PDF: ("Multiple PDF files are not allowed", "Please select only one PDF file"),
    ErrorKind.MULTIPLE_PDF_IN_BATCH: ("Multiple PDF files are not allowed", "Please select only one PDF file"),
}


def _is_pdf(file: AttachmentFile) -> bool:
    return file.mime_type == PDF_MIME


def admit(candidates: Sequence[AttachmentFile], current: Sequence[AttachmentFile]) -> AdmissionResult:
    """Decide which candidates may join the working set ``current``.

    The type allowlist and the one-PDF-per-batch rule reject the whole batch;
    both look at the batch as selected, before anything is deduplicated. Files
    already present (same identity) are then dropped without being reported as
    rejected. A PDF arriving while ``current`` already holds one is rejected on
    its own; the rest of the batch still goes through.
    """
    candidates = list(candidates)
    unsupported = [c for c in candidates if c.mime_type not in SUPPORTED_MIME_TYPES]
    if unsupported:
        logger.debug("Rejecting batch of %d: unsupported types %s", len(candidates), [c.mime_type for c in unsupported])
        return AdmissionResult(accepted=[], rejected=candidates, reason=ErrorKind.UNSUPPORTED_TYPE)

    # the same PDF picked twice in one batch still counts once
    batch_pdfs = {c.identity for c in candidates if _is_pdf(c)}
    if len(batch_pdfs) > 1:
        logger.debug("Rejecting batch of %d: %d PDFs selected", len(candidates), len(batch_pdfs))
        return AdmissionResult(accepted=[], rejected=candidates, reason=ErrorKind.MULTIPLE_PDF_IN_BATCH)

    seen = {f.identity for f in current}
    fresh: List[AttachmentFile] = []
    for candidate in candidates:
        if candidate.identity in seen:
            continue
        seen.add(candidate.identity)
        fresh.append(candidate)

    if any(_is_pdf(f) for f in current):
        rejected = [c for c in fresh if _is_pdf(c)]
        accepted = [c for c in fresh if not _is_pdf(c)]
        if rejected:
            return AdmissionResult(accepted=accepted, rejected=rejected, reason=ErrorKind.DUPLICATE_PDF)
        return AdmissionResult(accepted=accepted)

    return AdmissionResult(accepted=fresh)


def remove(current: Sequence[AttachmentFile], identity: str) -> List[AttachmentFile]:
    return [f for f in current if f.identity != identity]


def precheck_upload(size_bytes: int, mime_type: Optional[str]) -> Optional[UploadRejection]:
    if size_bytes > MAX_IMAGE_UPLOAD_BYTES:
        return UploadRejection(ErrorKind.SIZE_EXCEEDED, "File size should be less than 5MB")
    if not (mime_type or "").startswith("image/"):
        return UploadRejection(ErrorKind.UNSUPPORTED_TYPE, "Please upload an image file")
    return None


def user_message(result: AdmissionResult) -> Tuple[str, str]:
    """Title and description for the toast shown after an admission attempt."""
    if result.reason is not None and not result.accepted:
        return _USER_MESSAGES[result.reason]
    added = f"{len(result.accepted)} file(s) have been added"
    if result.reason is not None:
        title, description = _USER_MESSAGES[result.reason]
        return "Files selected", f"{added}. {title}: {description}"
    return "Files selected", added


def format_file_size(size_bytes: int) -> str:
    if not size_bytes:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    exponent = min(int(math.floor(math.log(size_bytes) / math.log(1024))), len(units) - 1)
    value = round(size_bytes / math.pow(1024, exponent), 2)
    return f"{value:g} {units[exponent]}"


class AttachmentWorkingSet:
    """Client-side set of supporting documents owned by one editing session."""

    def __init__(self, files: Iterable[AttachmentFile] = ()) -> None:
        self._files: List[AttachmentFile] = []
        result = self.add(list(files))
        if not result.ok:
            raise ValueError(f"initial files violate attachment rules: {result.reason.value}")

    @property
    def files(self) -> List[AttachmentFile]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, identity: object) -> bool:
        return any(f.identity == identity for f in self._files)

    def add(self, candidates: Sequence[AttachmentFile]) -> AdmissionResult:
        result = admit(candidates, self._files)
        self._files.extend(result.accepted)
        return result

    def remove(self, identity: str) -> bool:
        before = len(self._files)
        self._files = remove(self._files, identity)
        return len(self._files) != before

    def reset(self) -> None:
        self._files.clear()


__all__ = [
    "PDF_MIME",
    "TEXT_MIME",
    "PPTX_MIME",
    "DOCX_MIME",
    "SUPPORTED_MIME_TYPES",
    "MAX_IMAGE_UPLOAD_BYTES",
    "AttachmentWorkingSet",
    "admit",
    "remove",
    "precheck_upload",
    "user_message",
    "format_file_size",
]
