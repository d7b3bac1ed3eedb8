"""
Gunicorn configuration for LeakGuard production deployment.

Usage:
    gunicorn leakguard.main:app -c gunicorn.conf.py

Environment overrides: PORT, WEB_CONCURRENCY, GUNICORN_TIMEOUT, LOG_LEVEL.
"""

import multiprocessing
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

# Default: CPU cores * 2 + 1. Each worker keeps its own DB pool (5 + 10 overflow).
workers = int(os.getenv("WEB_CONCURRENCY", str(multiprocessing.cpu_count() * 2 + 1)))

# FastAPI runs on Uvicorn's ASGI worker
worker_class = "uvicorn.workers.UvicornWorker"

# Ingestion is bounded by the detector statement timeout; 60s leaves headroom
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
graceful_timeout = 30
keepalive = 5

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")
