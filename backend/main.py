"""FastAPI backend application entry point.

uvicorn looks for the module-level ``app`` created here.
"""

import os

import uvicorn

from backend.app_factory import create_app
from grove.config.server import DEFAULT_API_PORT

app = create_app()


def main() -> None:
    """Run the application using uvicorn when executed directly."""
    port = int(os.getenv("GROVE_API_PORT", str(DEFAULT_API_PORT)))
    uvicorn.run("backend.main:app", host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
