import pytest

from reportdeck.core.exceptions import FileProcessingError
from reportdeck.core.exceptions import UploadLimitExceeded
from reportdeck.generation_logic import file_processing as fp
from reportdeck.models.report_models import SourceFile
from reportdeck.models.report_models import TextPart


# ---------------------------------------------------------------------------
# read_uploads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_read_uploads_keeps_order_and_content_type(make_dummy_upload):
    uploads = [
        make_dummy_upload("a.csv", b"x,y", "text/csv"),
        make_dummy_upload("b.pdf", b"%PDF", "application/pdf"),
    ]

    files = await fp.read_uploads(uploads, "req")

    assert [f.filename for f in files] == ["a.csv", "b.pdf"]
    assert files[0].mime_type == "text/csv"
    assert files[1].data == b"%PDF"


# ---------------------------------------------------------------------------
# normalize_files
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_normalize_files_empty_list():
    assert await fp.normalize_files([], "req") == []


@pytest.mark.asyncio
async def test_normalize_files_preserves_input_order(monkeypatch):
    async def fake_normalize(filename, _mime, _data, _rid):
        return TextPart(value=filename)

    monkeypatch.setattr(fp, "normalize_file", fake_normalize)
    files = [SourceFile(filename=name, data=b"1") for name in ("one", "two", "three")]

    parts = await fp.normalize_files(files, "req")

    assert [p.value for p in parts] == ["one", "two", "three"]


@pytest.mark.asyncio
async def test_normalize_files_fails_whole_batch(monkeypatch):
    async def fake_normalize(filename, _mime, _data, _rid):
        if filename == "bad.xlsx":
            raise FileProcessingError(filename)
        return TextPart(value=filename)

    monkeypatch.setattr(fp, "normalize_file", fake_normalize)
    files = [SourceFile(filename="ok.csv", data=b"1"), SourceFile(filename="bad.xlsx", data=b"1")]

    with pytest.raises(FileProcessingError) as exc:
        await fp.normalize_files(files, "req")
    assert exc.value.filename == "bad.xlsx"


@pytest.mark.asyncio
async def test_normalize_files_wraps_unexpected_errors(monkeypatch):
    async def fake_normalize(filename, _mime, _data, _rid):
        raise RuntimeError("boom")

    monkeypatch.setattr(fp, "normalize_file", fake_normalize)

    with pytest.raises(FileProcessingError) as exc:
        await fp.normalize_files([SourceFile(filename="x.pdf", data=b"1")], "req")
    assert exc.value.filename == "x.pdf"


@pytest.mark.asyncio
async def test_too_many_files(monkeypatch):
    monkeypatch.setattr(fp, "MAX_FILES", 2)
    files = [SourceFile(filename=f"{i}.csv", data=b"1") for i in range(3)]

    with pytest.raises(UploadLimitExceeded):
        await fp.normalize_files(files, "req")


@pytest.mark.asyncio
async def test_single_file_too_large(monkeypatch):
    monkeypatch.setattr(fp, "MAX_FILE_SIZE", 4)

    with pytest.raises(UploadLimitExceeded) as exc:
        await fp.normalize_files([SourceFile(filename="big.pdf", data=b"12345")], "req")
    assert "big.pdf" in str(exc.value)


@pytest.mark.asyncio
async def test_total_size_too_large(monkeypatch):
    monkeypatch.setattr(fp, "MAX_TOTAL_SIZE", 5)
    files = [SourceFile(filename="a.pdf", data=b"123"), SourceFile(filename="b.pdf", data=b"123")]

    with pytest.raises(UploadLimitExceeded):
        await fp.normalize_files(files, "req")
