from django.contrib import admin
from unfold.admin import ModelAdmin

from attendees import models


@admin.register(models.Participant)
class ParticipantAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["email", "full_name", "role", "valid_from", "valid_to", "drinks_allowed"]
    list_filter = ["role"]
    search_fields = ["email", "full_name"]
