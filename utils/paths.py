import os
import platform
import hashlib
from pathlib import Path
from .config import APP_NAME, DATA_DIR_ENV, STATE_FILE_NAME


def _platform_data_root() -> Path:
    if platform.system() == "Windows":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    if platform.system() == "Darwin":
        return Path.home() / "Library" / "Application Support"
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def get_base_data_dir() -> Path:
    """
    Directory holding the library state. PAGESPREAD_DATA_DIR wins over the
    platform default so portable installs and tests can relocate it.
    """
    override = os.environ.get(DATA_DIR_ENV)
    data_dir = Path(override).expanduser() if override else _platform_data_root() / APP_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_state_file_path() -> Path:
    return get_base_data_dir() / STATE_FILE_NAME


def get_document_id(document_path: Path) -> str:
    """Stable id for a document: md5 of its resolved location on disk."""
    return hashlib.md5(str(Path(document_path).resolve()).encode("utf-8")).hexdigest()
