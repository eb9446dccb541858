"""Development settings for the ResourceDesk project.

Debug on, any host, mail printed to the console. Celery tasks run inline
unless CELERY_EAGER=false, so notifications and audit rows appear without
a worker.
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_EAGER', 'true').lower() == 'true'  # noqa: F405

for _name in ('apps', 'shared'):
    LOGGING['loggers'][_name]['level'] = 'DEBUG'  # noqa: F405
LOGGING['handlers']['console']['level'] = 'DEBUG'  # noqa: F405
