"""
Gunicorn configuration for the accounts API
Run with: gunicorn -c gunicorn.conf.py
"""
import multiprocessing
import os

wsgi_app = "app.main:app"

# Server socket
bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '8000')}"

# Worker processes
# bcrypt hashing is CPU bound, so scale workers with cores: (2 * cores) + 1
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 100

# Timeouts
timeout = 30
keepalive = 5
graceful_timeout = 30  # Wait for in-flight requests during shutdown

proc_name = "job_tracker_accounts"

# Logging (application logs go through structlog to stdout)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()


def on_starting(server):
    """Called just before the master process is initialized."""
    if not os.getenv("SECRET_KEY"):
        server.log.warning("SECRET_KEY is not set in the environment; workers will fail unless .env provides it")
    server.log.info("Starting Gunicorn server")


def worker_int(worker):
    """Called when a worker receives the SIGINT or SIGQUIT signal."""
    worker.log.info("Worker received INT or QUIT signal")
