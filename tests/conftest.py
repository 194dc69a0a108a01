import io
from pathlib import Path

import pytest
from PIL import Image
from PyQt5.QtCore import QCoreApplication, QSettings

from models.document import DocumentLibrary
from utils.archive_handler import PageSource

# ------------------------------------------------------------
# Helpers shared by the test modules
# ------------------------------------------------------------

def make_png(width, height, color=(200, 200, 200)):
    """Real PNG bytes of the given size."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


class FakePageSource(PageSource):
    """In-memory page source; a None size makes that page unreadable."""
    file_type = "zip"

    def __init__(self, sizes, path="fake.cbz"):
        super().__init__(Path(path))
        self._pages = [make_png(*s) if s is not None else None for s in sizes]
        self.reads = []

    @property
    def page_count(self):
        return len(self._pages)

    def _read_page(self, index):
        self.reads.append(index)
        return self._pages[index]


class RecordingPool:
    """Stands in for QThreadPool; keeps workers instead of running them."""
    def __init__(self):
        self.started = []
        self.running = set()

    def start(self, worker):
        self.started.append(worker)

    def tryTake(self, worker):
        if worker in self.running or worker not in self.started:
            return False
        self.started.remove(worker)
        return True


PORTRAIT = (60, 100)
LANDSCAPE = (120, 100)

# ------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------

@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def settings(tmp_path):
    return QSettings(str(tmp_path / "settings.ini"), QSettings.IniFormat)


@pytest.fixture
def library(tmp_path):
    return DocumentLibrary(state_file=tmp_path / "state.json")


@pytest.fixture
def pool():
    return RecordingPool()
