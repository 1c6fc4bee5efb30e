import typing as t

import structlog
from django.contrib.auth.models import AbstractBaseUser
from ninja_extra import ControllerBase


class UserAwareController(ControllerBase):
    def user(self) -> AbstractBaseUser:
        """Get the user for this request."""
        return t.cast(AbstractBaseUser, self.context.request.user)  # type: ignore[union-attr]

    def bind_user_context(self) -> None:
        """Bind the authenticated operator to the structlog context of this request."""
        structlog.contextvars.bind_contextvars(user_id=str(self.user().pk))
