from django.apps import AppConfig


class MedtoolsConfig(AppConfig):
    name = 'medtools'
    verbose_name = 'RxNorm medication tools'
