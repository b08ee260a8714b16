"""
WSGI entry point for the healthify project.

Serve ``healthify.wsgi:application`` with gunicorn/uwsgi in production;
``manage.py runserver`` uses the same callable during development.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'healthify.settings')

application = get_wsgi_application()
