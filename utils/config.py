# File format constants
SUPPORTED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".gif", ".avif"}
SUPPORTED_ZIP_EXTS = {".zip", ".cbz"}
SUPPORTED_RAR_EXTS = {".rar", ".cbr"}
SUPPORTED_DOC_EXTS = {".pdf"}
SUPPORTED_EPUB_EXTS = {".epub"}
HIDDEN_PREFIX = "."
IGNORED_ARCHIVE_PREFIXES = ("__MACOSX/", HIDDEN_PREFIX)

# Layout decision
SPREAD_MIN_VIEWPORT_ASPECT = 1.2
PORTRAIT_PAGE_ASPECT = 0.8
# Typical manga/comic page when no page could be measured
DEFAULT_PAGE_ASPECT = 0.7
ASPECT_SAMPLE_PAGES = 10

# Image cache
DEFAULT_CACHE_MAX_ENTRIES = 100
DEFAULT_CACHE_MAX_BYTES = 100 * 1024 * 1024
PRELOAD_SINGLE_RADIUS = 2

# Rendering
PDF_RENDER_ZOOM = 2.0

# Persistence
APP_NAME = "PageSpread"
STATE_FILE_NAME = "state.json"
DATA_DIR_ENV = "PAGESPREAD_DATA_DIR"
SAVE_DELAY_MS = 2500
