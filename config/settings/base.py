"""Django base settings for E tū Events - common to all environments."""
import os
from pathlib import Path

import environ

BASE_DIR = Path(__file__).resolve().parent.parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, []),
    CORS_ALLOWED_ORIGINS=(list, []),
)

environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

# Application will fail to start if SECRET_KEY is not set (no default)
SECRET_KEY = env('SECRET_KEY')

DEBUG = env('DEBUG')

ALLOWED_HOSTS = env('ALLOWED_HOSTS')


DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'django.contrib.sites',
]

THIRD_PARTY_APPS = [
    'rest_framework',
    'django_filters',
    'corsheaders',
    'drf_spectacular',
    # allauth
    'allauth',
    'allauth.account',
]

LOCAL_APPS = [
    'apps.core',
    'apps.members',
    'apps.events',
    'apps.communication',
    'apps.bmm',
    'apps.reports',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS


MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'allauth.account.middleware.AccountMiddleware',
]

ROOT_URLCONF = 'config.urls'


TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

ASGI_APPLICATION = 'config.asgi.application'


DATABASES = {
    'default': env.db('DATABASE_URL', default='sqlite:///db.sqlite3'),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]


LANGUAGE_CODE = 'en-nz'

TIME_ZONE = 'Pacific/Auckland'

USE_I18N = True

USE_TZ = True


STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


LOGIN_URL = '/accounts/login/'
LOGIN_REDIRECT_URL = '/admin/'
LOGOUT_REDIRECT_URL = '/'

# django.contrib.sites
SITE_ID = 1

# django-allauth: staff sign in with username or email; no public sign-up
AUTHENTICATION_BACKENDS = [
    'django.contrib.auth.backends.ModelBackend',
    'allauth.account.auth_backends.AuthenticationBackend',
]

ACCOUNT_LOGIN_METHODS = {'username', 'email'}
ACCOUNT_SIGNUP_FIELDS = ['email*', 'username*', 'password1*', 'password2*']
ACCOUNT_EMAIL_VERIFICATION = 'none'
ACCOUNT_LOGOUT_ON_GET = False
ACCOUNT_SESSION_REMEMBER = True
ACCOUNT_ADAPTER = 'apps.core.adapters.StaffOnlyAccountAdapter'


REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'apps.core.authentication.SignedTokenAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.SearchFilter',
        'rest_framework.filters.OrderingFilter',
    ],
    'DEFAULT_PAGINATION_CLASS': 'rest_framework.pagination.PageNumberPagination',
    'PAGE_SIZE': 50,
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'DEFAULT_THROTTLE_CLASSES': [
        'rest_framework.throttling.AnonRateThrottle',
        'rest_framework.throttling.UserRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'anon': '60/minute',
        'user': '600/minute',
    },
}


SPECTACULAR_SETTINGS = {
    'TITLE': 'E tū Events API',
    'DESCRIPTION': 'Union member events, imports and BMM workflow API',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}


CORS_ALLOWED_ORIGINS = env('CORS_ALLOWED_ORIGINS')


# Admin bearer tokens (seconds)
ADMIN_TOKEN_MAX_AGE = env.int('ADMIN_TOKEN_MAX_AGE', default=60 * 60 * 12)


CELERY_BROKER_URL = env('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = env('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE

# BMM notification queues
BMM_EMAIL_QUEUE = env('BMM_EMAIL_QUEUE', default='bmm.email')
BMM_SMS_QUEUE = env('BMM_SMS_QUEUE', default='bmm.sms')

CELERY_TASK_ROUTES = {
    'apps.communication.tasks.deliver_email': {'queue': BMM_EMAIL_QUEUE},
    'apps.communication.tasks.deliver_sms': {'queue': BMM_SMS_QUEUE},
}

# Scheduled Informer pulls; empty token disables the entry at run time
INFORMER_EMAIL_MEMBERS_TOKEN = env('INFORMER_EMAIL_MEMBERS_TOKEN', default='')
INFORMER_SMS_MEMBERS_TOKEN = env('INFORMER_SMS_MEMBERS_TOKEN', default='')

CELERY_BEAT_SCHEDULE = {
    'import-informer-datasets': {
        'task': 'apps.members.tasks.import_scheduled_datasets',
        'schedule': 60 * 60 * 6,
    },
}


# Stratum (membership system)
STRATUM_EMAIL_API_URL = env('STRATUM_EMAIL_API_URL', default='')
STRATUM_SMS_API_URL = env('STRATUM_SMS_API_URL', default='')
STRATUM_MEMBER_API_URL = env('STRATUM_MEMBER_API_URL', default='')
STRATUM_SECURITY_KEY = env('STRATUM_SECURITY_KEY', default='')
STRATUM_FROM_ADDRESS = env('STRATUM_FROM_ADDRESS', default='Events@etu.nz')

# Mailjet
MAILJET_API_KEY = env('MAILJET_API_KEY', default='')
MAILJET_API_SECRET = env('MAILJET_API_SECRET', default='')
MAILJET_FROM_EMAIL = env('MAILJET_FROM_EMAIL', default='Events@etu.nz')
MAILJET_FROM_NAME = env('MAILJET_FROM_NAME', default='E tū Union')

# Informer (reporting datasets)
INFORMER_BASE_URL = env('INFORMER_BASE_URL', default='')

# BMM workflow
BMM_NORTHERN_REGION = env('BMM_NORTHERN_REGION', default='Northern Region')
BMM_CENTRAL_REGION = env('BMM_CENTRAL_REGION', default='Central Region')
BMM_SOUTHERN_REGION = env('BMM_SOUTHERN_REGION', default='Southern Region')
BMM_VENUE_CAPACITY = env.int('BMM_VENUE_CAPACITY', default=100)
BMM_LINK_BASE_URL = env('BMM_LINK_BASE_URL', default='https://events.etu.nz')
