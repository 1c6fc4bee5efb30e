from django.apps import AppConfig


class LumaConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "luma"
    verbose_name = "Lu.ma guest list"
