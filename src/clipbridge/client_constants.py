#!/usr/bin/env python3
"""Constants for client mode.

These constants control the poll interval defaults and the exponential
backoff used while waiting for the server to become reachable at startup.
"""

# Default seconds between convergence cycles.
DEFAULT_INTERVAL: float = 1.0

# Default server base URL.
DEFAULT_SERVER_URL: str = "http://127.0.0.1:8080"

# Source label used when the hostname cannot be determined.
FALLBACK_SOURCE: str = "linux-client"

# Retry parameters for exponential backoff while the server is unreachable.
# Initial delay between connection attempts in seconds.
INITIAL_WAIT: float = 1.0

# Maximum delay between connection attempts in seconds.
MAX_WAIT: float = 60.0

# Multiplier for exponential backoff (delay = initial * multiplier^attempt).
WAIT_MULTIPLIER: float = 2.0
