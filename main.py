import logging
import sys
from pathlib import Path

from PyQt5.QtCore import QCoreApplication

from controllers.reader_session import ReaderSession
from models.document import DocumentLibrary
from utils.config import APP_NAME

DEFAULT_VIEWPORT = (1600, 900)


def main() -> None:
    """
    Opens a document, lays it out for a viewport and prints the slot table.
    Usage: main.py <document> [width height]
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    app = QCoreApplication(sys.argv)
    app.setOrganizationName(APP_NAME)
    app.setApplicationName(APP_NAME)

    if len(sys.argv) < 2:
        print("Usage: main.py <document> [width height]")
        sys.exit(2)

    path = Path(sys.argv[1])
    try:
        width, height = (int(v) for v in sys.argv[2:4]) if len(sys.argv) >= 4 else DEFAULT_VIEWPORT
    except ValueError:
        print(f"Invalid viewport size: {' '.join(sys.argv[2:4])}")
        sys.exit(2)

    library = DocumentLibrary()
    session = ReaderSession.open_document(path, library)
    if session is None:
        print(f"Could not open {path}")
        sys.exit(1)

    decision = session.update_viewport(width, height)
    mode = "spread" if decision.use_spread else "single"
    print(f"{session.record.display_name}: {session.total_pages} pages, {mode} layout")
    for index in range(session.current_slot_count):
        pages = session.display_pages(index)
        print(f"  slot {index}: {', '.join(str(p + 1) for p in pages)}")

    session.close()
    library.save()
    sys.exit(0)


if __name__ == "__main__":
    main()
