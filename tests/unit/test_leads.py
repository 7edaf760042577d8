from __future__ import annotations

import pytest

from parkline.models.crm import LeadSubmission
from parkline.services.leads import LeadValidationError, validate_lead


def test_valid_submission_passes():
    sub = LeadSubmission(name="Ana", email="ana@example.mk", message="Interested in 2.1", phone="+389 70 123 456")
    assert validate_lead(sub) is sub


def test_from_form_trims_and_blanks_to_none():
    sub = LeadSubmission.from_form({"name": "  Ana ", "email": "ana@example.mk", "message": " hi ", "phone": "  "})
    assert sub.name == "Ana"
    assert sub.message == "hi"
    assert sub.phone is None
    assert sub.apartment_id is None
    assert sub.source == "website"


def test_all_problems_reported():
    with pytest.raises(LeadValidationError) as e:
        validate_lead(LeadSubmission(name="", email="", message=""))
    assert e.value.errors == ["name is required", "email is required", "message is required"]


def test_blank_values_count_as_missing():
    with pytest.raises(LeadValidationError) as e:
        validate_lead(LeadSubmission(name="   ", email="ana@example.mk", message="  "))
    assert e.value.errors == ["name is required", "message is required"]


@pytest.mark.parametrize("email", ["ana", "ana@", "ana@example", "a na@example.mk", "@example.mk"])
def test_invalid_email(email: str):
    with pytest.raises(LeadValidationError, match="email is invalid"):
        validate_lead(LeadSubmission(name="Ana", email=email, message="hi"))


@pytest.mark.parametrize("phone", ["123", "+38970abc123", "phone: 070123456"])
def test_invalid_phone(phone: str):
    with pytest.raises(LeadValidationError, match="phone is invalid"):
        validate_lead(LeadSubmission(name="Ana", email="ana@example.mk", message="hi", phone=phone))


@pytest.mark.parametrize("phone", ["070 123 456", "+389 (70) 123-456", "07012345"])
def test_valid_phone(phone: str):
    validate_lead(LeadSubmission(name="Ana", email="ana@example.mk", message="hi", phone=phone))
