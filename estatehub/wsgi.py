"""
WSGI config for the estatehub project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'estatehub.settings.prod')

application = get_wsgi_application()
