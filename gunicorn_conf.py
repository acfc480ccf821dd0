import os

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
# With the default memory:// RATE_LIMIT_STORAGE_URI each worker counts submissions
# separately; point it at redis:// to share the hourly limits.
workers = int(os.getenv("WEB_CONCURRENCY", 2))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv("GUNICORN_TIMEOUT", 30))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", 30))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", 5))

accesslog = "-"
errorlog = "-"
