from dataclasses import dataclass
from typing import List
import re

from storefront.checkout.errors import ValidationError
from storefront.checkout.models import ShippingDetails

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[6-9][0-9]{9}$")
PINCODE_RE = re.compile(r"^[0-9]{6}$")

MIN_NAME_LENGTH = 2
MIN_ADDRESS_LENGTH = 10


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def normalize_phone(phone: str) -> str:
    return re.sub(r"[^0-9]", "", phone or "")


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(normalize_phone(phone)))


def is_valid_pincode(pincode: str) -> bool:
    value = (pincode or "").strip()
    return bool(PINCODE_RE.match(value)) and 100000 <= int(value) <= 999999


def validate_shipping(details: ShippingDetails) -> List[FieldError]:
    """Retourne toutes les erreurs, dans l'ordre d'affichage du formulaire."""
    errors: List[FieldError] = []
    if len((details.full_name or "").strip()) < MIN_NAME_LENGTH:
        errors.append(FieldError("full_name", "Please enter your full name"))
    if not EMAIL_RE.match((details.email or "").strip()):
        errors.append(FieldError("email", "Please enter a valid email address"))
    if not is_valid_phone(details.phone):
        errors.append(FieldError("phone", "Please enter a valid 10-digit mobile number"))
    if len((details.address_line or "").strip()) < MIN_ADDRESS_LENGTH:
        errors.append(FieldError("address_line", "Please enter a complete address"))
    if not (details.city or "").strip():
        errors.append(FieldError("city", "Please enter your city"))
    if not (details.state or "").strip():
        errors.append(FieldError("state", "Please enter your state"))
    if not is_valid_pincode(details.pincode):
        errors.append(FieldError("pincode", "Please enter a valid 6-digit pincode"))
    return errors


def ensure_valid_shipping(details: ShippingDetails) -> None:
    errors = validate_shipping(details)
    if errors:
        raise ValidationError(errors[0].field, errors[0].message)
