import typing as t

from django.db import models

from common.models import TimeStampedModel


class Participant(TimeStampedModel):
    """A person on the attendee list who may request a drinks pass.

    Only participants with a role are eligible for a pass.
    """

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=255, blank=True, default="")
    role = models.CharField(max_length=100, blank=True, default="")
    valid_from = models.DateField(null=True, blank=True)
    valid_to = models.DateField(null=True, blank=True)
    drinks_allowed = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["email"]

    def __str__(self) -> str:
        return self.full_name or self.email

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
