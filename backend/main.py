"""FastAPI backend application entry point.

This module initializes the application using the factory pattern.
It serves as the entry point for uvicorn.
"""

import os

import uvicorn

from arena.config.server import DEFAULT_API_PORT
from backend.app_factory import create_app

# This global 'app' variable is what uvicorn looks for
app = create_app()


def main() -> None:
    """Run the application using uvicorn when executed directly."""
    port = int(os.getenv("ARENA_API_PORT", str(DEFAULT_API_PORT)))
    is_production = os.getenv("PRODUCTION", "false").lower() == "true"

    # One process only: the world lives in this process's stepper thread
    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=port,
        reload=not is_production,
        log_level=os.getenv("ARENA_LOG_LEVEL", "info").lower(),
        loop="asyncio" if os.name == "nt" else "auto",
    )


if __name__ == "__main__":
    main()
