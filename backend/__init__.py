"""Backend package for the Grove interactive evolution API.

This package provides the FastAPI web server a browser UI drives: it shows
the current generation, records picks, and triggers breeding.
"""

__version__ = "0.1.0"
