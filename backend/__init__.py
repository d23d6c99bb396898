"""Backend package for the Creature Arena server.

This package provides the FastAPI web server, the background stepper
thread and the WebSocket snapshot broadcast pipeline.
"""

__version__ = "1.0.0"
