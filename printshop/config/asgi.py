"""
ASGI config for the print shop dashboard.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'printshop.config.settings')

application = get_asgi_application()
