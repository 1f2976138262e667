"""Avatar upload value object."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StoredUpload:
    """An avatar file fully written to storage, not yet referenced by a user."""

    reference: str
    original_name: str
    content_type: str
    size: int
