"""Django test settings for E tū Events."""
import os

os.environ.setdefault('SECRET_KEY', 'django-insecure-test-only-key')

from .base import *  # noqa: F401, F403

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


# Queue consumers run inline
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# Every external client runs in stub mode
STRATUM_EMAIL_API_URL = ''
STRATUM_SMS_API_URL = ''
STRATUM_MEMBER_API_URL = ''
STRATUM_SECURITY_KEY = ''
MAILJET_API_KEY = ''
MAILJET_API_SECRET = ''
INFORMER_BASE_URL = 'https://informer.example.test'
INFORMER_EMAIL_MEMBERS_TOKEN = ''
INFORMER_SMS_MEMBERS_TOKEN = ''

BMM_NORTHERN_REGION = 'Northern Region'
BMM_CENTRAL_REGION = 'Central Region'
BMM_SOUTHERN_REGION = 'Southern Region'
BMM_VENUE_CAPACITY = 100
BMM_LINK_BASE_URL = 'https://events.etu.nz'

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'DEFAULT_THROTTLE_CLASSES': [],
}
