"""
Celery application for the walletproject project.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'walletproject.settings')

app = Celery('walletproject')

# Read CELERY_* values from the Django settings module
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()
