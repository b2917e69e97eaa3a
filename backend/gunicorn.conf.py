"""Gunicorn configuration for production deployment.

Run with: gunicorn -c gunicorn.conf.py openspace.main:app
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")

# Admin traffic is light; a few async workers are plenty
workers = int(os.getenv("GUNICORN_WORKERS", min(multiprocessing.cpu_count() + 1, 4)))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 5000  # Recycle workers periodically
max_requests_jitter = 500

# Revenue queries carry their own timeout; this only bounds stuck workers
timeout = 60
graceful_timeout = 30
keepalive = 5

proc_name = "openspace-admin-api"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

preload_app = False
