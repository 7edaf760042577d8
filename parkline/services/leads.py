from __future__ import annotations

import re

from parkline.models.crm import LeadSubmission

"""Contact-form lead validation."""

__all__ = ["LeadValidationError", "validate_lead", "EMAIL_PATTERN", "PHONE_PATTERN"]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-()]{8,}$")


class LeadValidationError(Exception):
    """Raised with every problem found in a submission."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def validate_lead(submission: LeadSubmission) -> LeadSubmission:
    """Return ``submission`` unchanged or raise LeadValidationError."""
    errors: list[str] = []
    if not submission.name.strip():
        errors.append("name is required")
    if not submission.email.strip():
        errors.append("email is required")
    elif not EMAIL_PATTERN.match(submission.email.strip()):
        errors.append("email is invalid")
    if not submission.message.strip():
        errors.append("message is required")
    if submission.phone and not PHONE_PATTERN.match(submission.phone.strip()):
        errors.append("phone is invalid")
    if errors:
        raise LeadValidationError(errors)
    return submission
