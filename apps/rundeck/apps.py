"""Django app configuration for the rundeck action app."""

from django.apps import AppConfig


class RundeckConfig(AppConfig):
    """Configuration for the Rundeck Action app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.rundeck"
    verbose_name = "Rundeck Action"
