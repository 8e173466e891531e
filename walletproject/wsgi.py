"""
WSGI config for the walletproject project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'walletproject.settings')

application = get_wsgi_application()
