import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction

from civic_portal.errors import Conflict, InvalidInput, StoreUnavailable

from .forms import RegistrationForm

logger = logging.getLogger(__name__)

User = get_user_model()


def register_user(data):
    """Create a ``USER``-role account from ``name``, ``email`` and ``password``.

    The role is never taken from the input, so self-registration cannot
    produce an admin.
    """
    form = RegistrationForm(data)
    if not form.is_valid():
        raise InvalidInput.from_form(form)

    email = form.cleaned_data["email"]
    if User.objects.filter(email__iexact=email).exists():
        raise Conflict("User with this email already exists")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email,
                email=email,
                password=form.cleaned_data["password"],
                name=form.cleaned_data["name"],
                role=User.Role.USER,
            )
    except IntegrityError as exc:
        raise Conflict("User with this email already exists") from exc
    except DatabaseError as exc:
        logger.exception("Failed to register user %s", email)
        raise StoreUnavailable() from exc

    logger.info("Registered user %s", user.pk)
    return user


def serialize_user(user):
    return {
        "id": user.pk,
        "name": user.name,
        "email": user.email,
        "role": user.role,
    }
