"""
Payment Record Data Classes.

Defines the complete PaymentRecord consumed by the HUB3 encoder and the
PartialPaymentRecord produced by extraction, together with the HUB3
constants shared by the rest of the package.

The Python attributes are snake_case; the JSON form (AI responses, CLI
output) uses the camelCase keys of the HUB3 form fields.
"""

import json
import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from uplatko.hub3.normalizers import CroatianAmountNormalizer

HUB3_HEADER = "HRVHUB30"
CURRENCY = "EUR"
DEFAULT_MODEL = "HR68"
DEFAULT_PURPOSE_CODE = "OTHR"

# Truncation points on the wire; model is only bounded at completion
FIELD_LIMITS = {
    'name': 30,
    'address': 27,
    'city': 27,
    'description': 35,
    'model': 5,
}

IBAN_PATTERN = re.compile(r'^HR\d{19}$')

# 15 digits of cents
MAX_AMOUNT = 10 ** 13 - 0.01

PURPOSE_CODES = {
    # Most common
    'OTHR': 'Ostalo',
    'ADVA': 'Avans',
    'SALA': 'Plaća',
    'COST': 'Troškovi',
    'SUPP': 'Dobavljač',
    'RENT': 'Najam',
    # Business and government
    'COMM': 'Provizija',
    'TAXS': 'Porez',
    'GOVT': 'Vlada / Država',
    'UTIL': 'Režije',
    # Specific
    'CASH': 'Gotovina',
    'DIVI': 'Dividenda',
    'LOAN': 'Zajam',
}

# attribute name -> JSON key
FIELD_KEYS = {
    'payer_name': 'payerName',
    'payer_address': 'payerAddress',
    'payer_city': 'payerCity',
    'recipient_name': 'recipientName',
    'recipient_address': 'recipientAddress',
    'recipient_city': 'recipientCity',
    'iban': 'iban',
    'amount': 'amount',
    'model': 'model',
    'reference_number': 'referenceNumber',
    'purpose_code': 'purposeCode',
    'description': 'description',
    'currency': 'currency',
}

_JSON_TO_ATTR = {v: k for k, v in FIELD_KEYS.items()}


@dataclass
class PaymentRecord:
    """
    A complete payment order, ready for HUB3 encoding.

    Example:
        >>> record = PaymentRecord(
        ...     recipient_name="ACME d.o.o.",
        ...     iban="HR1210010051863000160",
        ...     amount=100.0,
        ...     reference_number="12-345",
        ...     description="Racun 12/2026",
        ... )
    """
    payer_name: str = ""
    payer_address: str = ""
    payer_city: str = ""
    recipient_name: str = ""
    recipient_address: str = ""
    recipient_city: str = ""
    iban: str = ""
    amount: float = 0.0
    model: str = DEFAULT_MODEL
    reference_number: str = ""
    purpose_code: str = DEFAULT_PURPOSE_CODE
    description: str = ""
    currency: str = CURRENCY

    def to_dict(self) -> Dict[str, Any]:
        return {FIELD_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}


@dataclass
class PartialPaymentRecord:
    """
    Output of extraction: every field optional, None meaning "not found".

    Attributes mirror PaymentRecord. A partial record is completed with
    user edits and validated before it can be encoded
    (see uplatko.hub3.validators.build_payment_record).
    """
    payer_name: Optional[str] = None
    payer_address: Optional[str] = None
    payer_city: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_address: Optional[str] = None
    recipient_city: Optional[str] = None
    iban: Optional[str] = None
    amount: Optional[float] = None
    model: Optional[str] = None
    reference_number: Optional[str] = None
    purpose_code: Optional[str] = None
    description: Optional[str] = None
    currency: Optional[str] = None

    # Keys the source supplied that are not payment fields
    ignored_keys: List[str] = field(default_factory=list, compare=False, repr=False)

    @property
    def fields(self) -> Dict[str, Any]:
        """All payment fields by attribute name, absent ones as None."""
        return {name: getattr(self, name) for name in FIELD_KEYS}

    @property
    def missing_fields(self) -> List[str]:
        return [k for k, v in self.fields.items() if v is None or v == ""]

    @property
    def extracted_fields(self) -> Dict[str, Any]:
        return {k: v for k, v in self.fields.items() if v is not None and v != ""}

    def merge(self, overrides: Optional['PartialPaymentRecord']) -> 'PartialPaymentRecord':
        """
        Return a copy where every value present in ``overrides`` wins.

        Args:
            overrides: Edits to apply, typically user input.

        Returns:
            New PartialPaymentRecord; self is left untouched.
        """
        if overrides is None:
            return replace(self)
        changes = {k: v for k, v in overrides.fields.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Present fields keyed by their JSON names."""
        return {FIELD_KEYS[k]: v for k, v in self.fields.items() if v is not None}

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PartialPaymentRecord':
        """
        Build a partial record from a loosely typed mapping.

        Accepts camelCase JSON keys as well as attribute names. Unknown
        keys are remembered in ``ignored_keys``; null values are treated
        as absent. Text values are stripped, other scalars stringified.

        Raises:
            ValueError: If ``amount`` is present but not numeric.
        """
        values: Dict[str, Any] = {}
        ignored: List[str] = []

        for key, value in data.items():
            attr = _JSON_TO_ATTR.get(key, key if key in FIELD_KEYS else None)
            if attr is None:
                ignored.append(key)
                continue
            if value is None:
                continue
            if attr == 'amount':
                values[attr] = CroatianAmountNormalizer().coerce(value)
            elif isinstance(value, str):
                values[attr] = value.strip() or None
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                values[attr] = str(value)
            else:
                ignored.append(key)

        return cls(**values, ignored_keys=ignored)

    def __repr__(self) -> str:
        return (
            f"PartialPaymentRecord("
            f"recipient={self.recipient_name}, "
            f"iban={self.iban}, "
            f"amount={self.amount}, "
            f"missing={len(self.missing_fields)})"
        )
