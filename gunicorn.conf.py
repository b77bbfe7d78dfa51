"""Gunicorn configuration file.

Run with:
    gunicorn -c gunicorn.conf.py backend_resources.flask_app:app

Each request is handled by one sync worker thread; the only blocking call
is the outbound Keycloak request, bounded by KEYCLOAK_REQUEST_TIMEOUT.
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8080")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
worker_class = "sync"
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Logs the realm and credentials source the worker will use; secrets are
    read by backend_resources.config.settings (/run/secrets first, then env).
    """
    realm = os.environ.get("KEYCLOAK_REALM", "ITM")
    secrets_dir = "/run/secrets"
    if os.path.isdir(secrets_dir) and os.listdir(secrets_dir):
        worker.log.info(f"Worker {worker.pid}: realm={realm}, credentials from {secrets_dir}")
    else:
        worker.log.info(f"Worker {worker.pid}: realm={realm}, credentials from environment")
