"""
WSGI config for the print shop dashboard.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'printshop.config.settings')

application = get_wsgi_application()
