"""WSGI entrypoint for Gunicorn.

Usage:
  gunicorn -w 1 --threads 4 -b 127.0.0.1:8000 wsgi:app

Sessions live in process memory, so run a single worker.
"""

from luckydraw import create_app

app = create_app()
