from utils import paths
from utils.config import DATA_DIR_ENV, STATE_FILE_NAME


def test_data_dir_override(tmp_path, monkeypatch):
    target = tmp_path / "portable" / "data"
    monkeypatch.setenv(DATA_DIR_ENV, str(target))

    assert paths.get_base_data_dir() == target
    assert target.is_dir()
    assert paths.get_state_file_path() == target / STATE_FILE_NAME


def test_linux_default_follows_xdg(tmp_path, monkeypatch):
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)
    monkeypatch.setattr(paths.platform, "system", lambda: "Linux")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert paths.get_base_data_dir() == tmp_path / "PageSpread"


def test_document_id_ignores_how_the_path_is_spelled(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    absolute = paths.get_document_id(tmp_path / "book.cbz")

    assert paths.get_document_id("book.cbz") == absolute
    assert paths.get_document_id(tmp_path / "sub" / ".." / "book.cbz") == absolute
    assert paths.get_document_id(tmp_path / "other.cbz") != absolute
    assert len(absolute) == 32
