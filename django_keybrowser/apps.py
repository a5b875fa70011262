from django.apps import AppConfig


class KeyBrowserConfig(AppConfig):
    """Django app configuration for the Redis/Valkey key browser API."""

    name = "django_keybrowser"
    label = "django_keybrowser"
    verbose_name = "django-keybrowser"
