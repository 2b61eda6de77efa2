"""
WSGI config for the QuikPrint project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'quikprint.settings')

application = get_wsgi_application()
