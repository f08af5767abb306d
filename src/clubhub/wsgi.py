"""WSGI config for the clubhub project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "clubhub.settings")

application = get_wsgi_application()
