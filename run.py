"""
Entry point for the globe flight tracker.

Running this script with ``python run.py`` will start the FastAPI
server that powers both the backend API and the frontend UI.  The
application defined in ``backend/globe/main.py`` is imported after
adjusting the Python path to include the backend directory.
"""

from __future__ import annotations

import sys
from pathlib import Path

import logging
import uvicorn

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """Run the Uvicorn server hosting the globe application."""
    # Ensure ``backend`` is on sys.path so that ``globe`` can be imported
    # when running from a source checkout.
    backend_dir = Path(__file__).resolve().parent / "backend"
    if str(backend_dir) not in sys.path:
        sys.path.append(str(backend_dir))

    # Import inside main() to avoid modifying sys.path at module import time.
    from globe.main import app  # type: ignore

    # Bind to all interfaces on port 8000 by default.
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
