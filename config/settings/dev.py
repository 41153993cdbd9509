"""Local development settings: debug on, mail printed to the console."""

from .base import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Celery tasks run inline unless a broker is configured
CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'true').lower() == 'true'  # noqa: F405

# Human readable log lines in the terminal
LOGGING['handlers']['console']['formatter'] = 'console'  # noqa: F405
