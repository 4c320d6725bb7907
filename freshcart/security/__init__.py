# Identity and role checks (FastAPI dependencies live in .auth)

from .roles import (
    AppRole,
    Capability,
    Identity,
    has_capability,
    can_set_status,
    home_path_for,
)

__all__ = [
    "AppRole",
    "Capability",
    "Identity",
    "has_capability",
    "can_set_status",
    "home_path_for",
]
