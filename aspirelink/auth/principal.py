from pydantic import BaseModel


class Principal(BaseModel):
    """The caller as asserted by a verified bearer token."""

    uid: str
    email: str | None = None
    display_name: str | None = None
