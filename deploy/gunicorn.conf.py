"""
Gunicorn Configuration

Production settings for the InfinityTrain API.
Run: gunicorn -c deploy/gunicorn.conf.py infinitytrain.main:app
"""
import os
import multiprocessing

# Server socket
bind = os.environ.get("BIND", "0.0.0.0:5000")
backlog = 2048

# Worker processes (uvicorn workers for the async app)
workers = int(os.environ.get("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 120
keepalive = 5

# Logging
accesslog = os.environ.get("GUNICORN_ACCESS_LOG", "-")
errorlog = os.environ.get("GUNICORN_ERROR_LOG", "-")
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "infinitytrain"

# Server mechanics
daemon = False
pidfile = "/tmp/infinitytrain-gunicorn.pid"

# Uploads are capped by the app; this only bounds the request line and headers
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def when_ready(server):
    server.log.info(f"InfinityTrain ready with {workers} workers on {bind}")


def on_exit(server):
    server.log.info("InfinityTrain shutting down")
