"""
Gunicorn configuration for the offers API.

The APScheduler sweep runs inside every worker; the sweep is idempotent, so
several workers sweeping concurrently is harmless. Set SCHEDULER_ENABLED=false
on all but one deployment if the extra queries matter.
"""
import multiprocessing
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("GUNICORN_WORKERS", min(multiprocessing.cpu_count() * 2 + 1, 4)))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker lifecycle
max_requests = 1000  # Restart worker after 1000 requests
max_requests_jitter = 100

# Timeouts
timeout = 30
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "jobboard_offers_api"

daemon = False

# Logging
accesslog = "-"  # Log to stdout
errorlog = "-"   # Log to stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)s'


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting offers API")


def when_ready(server):
    server.log.info("Offers API ready, spawning %s workers", workers)


def worker_abort(worker):
    """Called when a worker is aborted (usually a request timeout)."""
    worker.log.warning("Worker %s aborted", worker.pid)
