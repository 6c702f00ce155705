from __future__ import annotations

import pytest

from src.asset_engine import (
    AttachmentFile,
    AttachmentWorkingSet,
    ErrorKind,
    admit,
    format_file_size,
    make_identity,
    precheck_upload,
    remove,
    user_message,
)
from src.asset_engine.attachments import DOCX_MIME, MAX_IMAGE_UPLOAD_BYTES, PDF_MIME, PPTX_MIME, TEXT_MIME


def pdf(name: str, modified: int = 1) -> AttachmentFile:
    return AttachmentFile(name=name, size_bytes=1000, mime_type=PDF_MIME, last_modified=modified)


def txt(name: str, modified: int = 1) -> AttachmentFile:
    return AttachmentFile(name=name, size_bytes=10, mime_type=TEXT_MIME, last_modified=modified)


def exe(name: str) -> AttachmentFile:
    return AttachmentFile(name=name, size_bytes=10, mime_type="application/x-msdownload")


def test_identity_is_derived_from_name_timestamp_and_size() -> None:
    file = AttachmentFile(name="notes.txt", size_bytes=42, mime_type=TEXT_MIME, last_modified=1700000000000)
    assert file.identity == "notes.txt-1700000000000-42"
    assert make_identity("", 5, 7) == "unnamed-5-7"


def test_negative_size_is_rejected() -> None:
    with pytest.raises(ValueError):
        AttachmentFile(name="x.txt", size_bytes=-1, mime_type=TEXT_MIME)


def test_batch_with_unsupported_type_is_rejected_in_full() -> None:
    batch = [pdf("a.pdf"), exe("setup.exe")]
    result = admit(batch, [])
    assert result.accepted == []
    assert result.rejected == batch
    assert result.reason is ErrorKind.UNSUPPORTED_TYPE


def test_valid_batch_against_empty_set_is_accepted_in_full() -> None:
    batch = [pdf("a.pdf"), txt("c.txt")]
    result = admit(batch, [])
    assert result.accepted == batch
    assert result.rejected == []
    assert result.ok


def test_all_four_document_types_are_admissible() -> None:
    batch = [
        pdf("a.pdf"),
        txt("b.txt"),
        AttachmentFile(name="c.pptx", size_bytes=5, mime_type=PPTX_MIME),
        AttachmentFile(name="d.docx", size_bytes=5, mime_type=DOCX_MIME),
    ]
    assert admit(batch, []).accepted == batch


def test_second_pdf_is_dropped_but_rest_of_batch_admitted() -> None:
    pdf_a, pdf_b, txt_c = pdf("a.pdf"), pdf("b.pdf"), txt("c.txt")
    result = admit([pdf_b, txt_c], [pdf_a])
    assert result.accepted == [txt_c]
    assert result.rejected == [pdf_b]
    assert result.reason is ErrorKind.DUPLICATE_PDF


def test_two_pdfs_in_one_batch_reject_everything() -> None:
    batch = [pdf("a.pdf"), pdf("b.pdf"), txt("c.txt")]
    result = admit(batch, [])
    assert result.accepted == []
    assert result.rejected == batch
    assert result.reason is ErrorKind.MULTIPLE_PDF_IN_BATCH


def test_two_pdfs_in_batch_win_over_dedup_against_current() -> None:
    current = [pdf("a.pdf")]
    batch = [pdf("a.pdf"), pdf("b.pdf"), txt("c.txt")]
    result = admit(batch, current)
    assert result.accepted == []
    assert result.rejected == batch
    assert result.reason is ErrorKind.MULTIPLE_PDF_IN_BATCH


def test_same_pdf_picked_twice_in_a_batch_counts_once() -> None:
    result = admit([pdf("a.pdf"), pdf("a.pdf"), txt("c.txt")], [])
    assert [f.name for f in result.accepted] == ["a.pdf", "c.txt"]
    assert result.reason is None


def test_reselecting_same_file_is_a_silent_no_op() -> None:
    original = txt("x.txt", modified=99)
    again = txt("x.txt", modified=99)
    result = admit([again], [original])
    assert result.accepted == []
    assert result.rejected == []
    assert result.reason is None


def test_reselecting_the_current_pdf_is_not_a_duplicate_pdf_error() -> None:
    current = [pdf("a.pdf", modified=3)]
    result = admit([pdf("a.pdf", modified=3)], current)
    assert result.accepted == []
    assert result.reason is None


def test_same_file_twice_in_a_batch_is_admitted_once() -> None:
    result = admit([txt("x.txt"), txt("x.txt")], [])
    assert len(result.accepted) == 1


def test_remove_is_idempotent() -> None:
    a, b = txt("a.txt"), txt("b.txt")
    after = remove([a, b], a.identity)
    assert after == [b]
    assert remove(after, a.identity) == [b]
    assert remove([], "missing") == []


def test_working_set_enforces_single_pdf_across_batches() -> None:
    working = AttachmentWorkingSet()
    assert working.add([pdf("a.pdf")]).ok
    result = working.add([pdf("b.pdf"), txt("c.txt")])
    assert result.reason is ErrorKind.DUPLICATE_PDF
    assert [f.name for f in working.files] == ["a.pdf", "c.txt"]

    assert working.remove(pdf("a.pdf").identity) is True
    assert working.remove(pdf("a.pdf").identity) is False
    assert working.add([pdf("b.pdf")]).ok
    working.reset()
    assert len(working) == 0


def test_working_set_rejects_invalid_initial_files() -> None:
    with pytest.raises(ValueError):
        AttachmentWorkingSet([pdf("a.pdf"), pdf("b.pdf")])


def test_precheck_upload_reports_size_then_type() -> None:
    too_big = precheck_upload(MAX_IMAGE_UPLOAD_BYTES + 1, "image/png")
    assert too_big.kind is ErrorKind.SIZE_EXCEEDED
    assert too_big.message == "File size should be less than 5MB"

    not_image = precheck_upload(10, "application/pdf")
    assert not_image.kind is ErrorKind.UNSUPPORTED_TYPE
    assert not_image.message == "Please upload an image file"
    assert too_big.message != not_image.message

    assert precheck_upload(MAX_IMAGE_UPLOAD_BYTES, "image/jpeg") is None


def test_user_messages() -> None:
    assert user_message(admit([exe("x.exe")], [])) == (
        "Invalid file type",
        "Please upload only PDF, TXT, PPTX, or DOCX files",
    )
    assert user_message(admit([pdf("b.pdf")], [pdf("a.pdf")]))[0] == "Multiple PDF files are not allowed"
    assert user_message(admit([txt("a.txt"), txt("b.txt")], [])) == ("Files selected", "2 file(s) have been added")


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 Bytes"), (512, "512 Bytes"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5 MB"), (3 * 1024**3, "3 GB")],
)
def test_format_file_size(size, expected) -> None:
    assert format_file_size(size) == expected


def test_partial_admission_message_mentions_the_dropped_pdf() -> None:
    title, description = user_message(admit([pdf("b.pdf"), txt("c.txt")], [pdf("a.pdf")]))
    assert title == "Files selected"
    assert description == "1 file(s) have been added. Multiple PDF files are not allowed: Please select only one PDF file"
