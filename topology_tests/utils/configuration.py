"""Test harness configuration."""

import os

# Pause after each node start when a cluster is started sequentially
SEQUENTIAL_START_DELAY = float(os.environ.get("SEQUENTIAL_START_DELAY") or 2)
if SEQUENTIAL_START_DELAY < 0:
    msg = f"Invalid SEQUENTIAL_START_DELAY '{SEQUENTIAL_START_DELAY}': must be >= 0"
    raise RuntimeError(msg)

# Upper bound of worker threads used for starting cluster nodes in parallel
MAX_START_WORKERS = int(os.environ.get("MAX_START_WORKERS") or 16)
if MAX_START_WORKERS < 1:
    msg = f"Invalid MAX_START_WORKERS '{MAX_START_WORKERS}': must be >= 1"
    raise RuntimeError(msg)

# Same format as used by the docker CLI, e.g. "tcp://192.168.99.100:2376"
DOCKER_HOST = os.environ.get("DOCKER_HOST") or ""

HTTP_CONNECT_TIMEOUT = float(os.environ.get("HTTP_CONNECT_TIMEOUT") or 5)
HTTP_READ_TIMEOUT = float(os.environ.get("HTTP_READ_TIMEOUT") or 5)
HTTP_POOL_CONNECTIONS = int(os.environ.get("HTTP_POOL_CONNECTIONS") or 100)
HTTP_POOL_MAXSIZE = int(os.environ.get("HTTP_POOL_MAXSIZE") or 50)

# Defaults for polling deferred executions until they succeed
WAIT_TIMEOUT = float(os.environ.get("WAIT_TIMEOUT") or 60)
POLL_INTERVAL = float(os.environ.get("POLL_INTERVAL") or 1)
if POLL_INTERVAL <= 0:
    msg = f"Invalid POLL_INTERVAL '{POLL_INTERVAL}': must be > 0"
    raise RuntimeError(msg)
