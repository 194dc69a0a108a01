import zipfile

import fitz
import pytest

from conftest import PORTRAIT, make_png
from utils.archive_handler import (
    FolderPageSource,
    PdfPageSource,
    ZipPageSource,
    detect_file_type,
    open_page_source,
)
from utils.images import get_aspect_ratio


@pytest.fixture
def cbz(tmp_path):
    path = tmp_path / "book.cbz"
    with zipfile.ZipFile(path, "w") as zf:
        # Natural order puts page2 before page10
        zf.writestr("page10.png", make_png(30, 10))
        zf.writestr("page2.png", make_png(20, 10))
        zf.writestr("page1.png", make_png(10, 10))
        zf.writestr("__MACOSX/page1.png", b"junk")
        zf.writestr("notes.txt", b"not an image")
        zf.writestr("extras/", b"")
    return path


def test_zip_pages_are_naturally_sorted(cbz):
    source = open_page_source(cbz)
    assert isinstance(source, ZipPageSource)
    assert source.page_count == 3
    assert [get_aspect_ratio(source.get_page_bytes(i)) for i in range(3)] == [1.0, 2.0, 3.0]


def test_out_of_range_page_is_none(cbz):
    source = open_page_source(cbz)
    assert source.get_page_bytes(3) is None
    assert source.get_page_bytes(-1) is None


def test_folder_source_skips_hidden_and_foreign_files(tmp_path):
    folder = tmp_path / "chapter"
    folder.mkdir()
    (folder / "02.png").write_bytes(make_png(*PORTRAIT))
    (folder / "01.png").write_bytes(make_png(*PORTRAIT))
    (folder / ".thumb.png").write_bytes(make_png(*PORTRAIT))
    (folder / "info.txt").write_text("hello")

    source = open_page_source(folder)
    assert isinstance(source, FolderPageSource)
    assert [p.name for p in source._files] == ["01.png", "02.png"]
    assert len(source) == 2


def test_pdf_pages_render_to_png(tmp_path):
    path = tmp_path / "doc.pdf"
    doc = fitz.open()
    doc.new_page(width=300, height=500)
    doc.new_page(width=300, height=500)
    doc.save(str(path))
    doc.close()

    source = open_page_source(path)
    assert isinstance(source, PdfPageSource)
    assert source.page_count == 2
    assert get_aspect_ratio(source.get_page_bytes(0)) == pytest.approx(0.6, abs=0.01)


@pytest.mark.parametrize("name, expected", [
    ("a.cbz", "zip"),
    ("a.ZIP", "zip"),
    ("a.cbr", "rar"),
    ("a.pdf", "pdf"),
    ("a.epub", "epub"),
    ("a.txt", None),
])
def test_detect_file_type(tmp_path, name, expected):
    assert detect_file_type(tmp_path / name) == expected


def test_unusable_paths_give_no_source(tmp_path):
    assert open_page_source(tmp_path / "missing.cbz") is None

    text = tmp_path / "readme.txt"
    text.write_text("hi")
    assert open_page_source(text) is None

    broken = tmp_path / "broken.cbz"
    broken.write_bytes(b"this is not a zip")
    assert open_page_source(broken) is None


@pytest.mark.parametrize("data", [None, b"", b"garbage"])
def test_aspect_ratio_of_unreadable_bytes(data):
    assert get_aspect_ratio(data) is None
