"""
controllers package
~~~~~~~~~~~~~~~~~~~
Convenience re-exports so other modules can write:

    from controllers import ReaderSession, LayoutEngine
"""
from .layout_engine import LayoutDecision, LayoutEngine, PageOutOfRangeError  # noqa: F401
from .navigation import NavigationEngine  # noqa: F401
from .reader_session import ReaderSession  # noqa: F401
