"""
Gunicorn configuration for the Good Day API server.

Env vars that override defaults:
  PORT     — TCP port to bind
  WORKERS  — number of worker processes (default: 2)

Run with:  gunicorn goodday.main:app -c gunicorn.conf.py
The weekly report and reminder timers run in a separate process
(`goodday-scheduler`), so every worker here only serves requests.
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "2"))

worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# A manual weekly-reports run renders and commits for every user.
timeout = 300

loglevel = "info"
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
