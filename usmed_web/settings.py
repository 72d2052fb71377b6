"""
Django settings for usmed_web project.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-usmed-tools-dev-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'False').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'medtools',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'usmed_web.urls'

WSGI_APPLICATION = 'usmed_web.wsgi.application'

# Nothing is persisted; the database only backs the contrib apps DRF expects.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'UNAUTHENTICATED_USER': None,
}

# RxNorm medication tools
MEDTOOLS = {
    'RXNAV_BASE_URL': os.environ.get('RXNAV_BASE_URL', 'https://rxnav.nlm.nih.gov/REST'),
    'RXNAV_TIMEOUT': float(os.environ.get('RXNAV_TIMEOUT', 10)),
    'LOOKUP_BRAND_LIMIT': 25,
    'LOOKUP_FORMULATION_LIMIT': 12,
    'ALTERNATIVE_BRAND_LIMIT': 60,
    # 1 = fetch each ingredient's brands one after another
    'ALTERNATIVE_BRAND_WORKERS': 1,
}
