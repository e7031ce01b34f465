"""Gunicorn configuration for production deployment."""

import os

# Server socket
bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

# Worker processes: each worker runs its own mail thread.
# SQLite serializes writers, so keep the worker count small.
workers = 2
threads = 4
worker_class = 'gthread'

timeout = 30
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = 'logs/gunicorn-access.log'
errorlog = 'logs/gunicorn-error.log'
loglevel = 'info'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = 'bookings'

# Not preloaded: the mail worker thread must start inside each worker process
preload_app = False

# Worker recycling
max_requests = 1000
max_requests_jitter = 50

# Security
limit_request_line = 8190
limit_request_fields = 100
limit_request_field_size = 8190
