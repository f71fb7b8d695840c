from enum import Enum
from typing import Any, Dict, Iterable, Optional
from pydantic import BaseModel, ConfigDict


class CheckoutStep(str, Enum):
    IDENTIFY = "identify"
    SHIPPING_DETAILS = "shipping_details"
    PAYMENT = "payment"
    CONFIRMED = "confirmed"


# Noms de champs acceptés à la relecture (profils, commandes récentes et anciennes)
_RECORD_ALIASES = {
    "full_name": ("full_name", "name", "customer_name"),
    "email": ("email", "user_email", "customer_email"),
    "phone": ("phone", "user_phone", "customer_phone", "contact"),
    "address_line": ("address_line", "street", "address"),
    "city": ("city",),
    "state": ("state",),
    "pincode": ("pincode", "postal_code", "zip"),
    "landmark": ("landmark",),
}


def _first(record: Dict[str, Any], names: Iterable[str]) -> str:
    for name in names:
        value = record.get(name)
        if isinstance(value, (str, int)) and str(value).strip():
            return str(value).strip()
    return ""


class ShippingDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    full_name: str = ""
    email: str = ""
    phone: str = ""
    address_line: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    landmark: Optional[str] = None

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> "ShippingDetails":
        """
        Construit des coordonnées à partir d'un enregistrement hétérogène.
        Les adresses imbriquées (profil: {"address": {...}}) sont aplaties avant lecture.
        """
        record = dict(record or {})
        nested = record.get("address")
        if isinstance(nested, dict):
            record.pop("address")
            record = {**nested, **{k: v for k, v in record.items() if v not in (None, "")}}
        values = {field: _first(record, names) for field, names in _RECORD_ALIASES.items()}
        values["landmark"] = values["landmark"] or None
        return cls(**values)

    def is_blank(self) -> bool:
        return not any([self.full_name, self.phone, self.address_line, self.city, self.state, self.pincode])
