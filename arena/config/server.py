"""Server configuration constants."""

DEFAULT_API_PORT = 3000

# Broadcast backpressure
SLOW_SEND_SECONDS = 0.05  # A send slower than this switches the observer to gzip frames
SEND_TIMEOUT_SECONDS = 2.0  # A send slower than this drops the observer
FAST_SENDS_TO_RECOVER = 30  # Consecutive fast sends before going back to plain frames
