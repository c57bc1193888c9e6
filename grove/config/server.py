"""Web driver configuration constants."""

DEFAULT_API_PORT = 8000  # Default port for the FastAPI backend
DEFAULT_ARCHIVE_DIR = "data/evaluations"  # Where flushed generation archives land
