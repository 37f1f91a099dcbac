import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'insecure-development-key')
DEBUG = os.environ.get('DJANGO_DEBUG', '0') == '1'
ALLOWED_HOSTS = [host for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if host]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'fsm_validator',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'fsm_site.urls'
WSGI_APPLICATION = 'fsm_site.wsgi.application'

# Parsed models only live for a request; the database exists for the test runner
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

USE_TZ = True
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

FSM_VALIDATOR = {
    'MAX_DEFINITION_BYTES': int(os.environ.get('FSM_MAX_DEFINITION_BYTES', 65536)),
    'MAX_INPUT_LENGTH': int(os.environ.get('FSM_MAX_INPUT_LENGTH', 4096)),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'fsm_validator': {
            'handlers': ['console'],
            'level': os.environ.get('FSM_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
