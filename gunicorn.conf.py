# Gunicorn configuration for the PHR Manager
# Run with: gunicorn --config gunicorn.conf.py wsgi:app

import multiprocessing
import os

bind = os.getenv('GUNICORN_BIND', '0.0.0.0:8000')
workers = int(os.getenv('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
# Document uploads are capped at a few MB, so requests stay short
timeout = 60
graceful_timeout = 30
keepalive = 2

max_requests = 1000
max_requests_jitter = 100

loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')
accesslog = os.getenv('GUNICORN_ACCESS_LOG', '-')  # stdout
errorlog = os.getenv('GUNICORN_ERROR_LOG', '-')    # stderr
proc_name = 'phr-manager'
worker_tmp_dir = '/dev/shm'


def when_ready(server):
    server.log.info("PHR Manager is ready to serve requests")


def post_fork(server, worker):
    server.log.info(f"Worker {worker.pid} has been forked")


def on_exit(server):
    server.log.info("PHR Manager is shutting down")
