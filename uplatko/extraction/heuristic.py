"""
Heuristic Text Extractor Module.

Regex and layout heuristics that pull HUB3 payment fields out of the raw
text of a Croatian invoice. Each field is searched independently; a field
that is not found is left as None, never guessed.

Payer fields are never filled: the payer is normally whoever scans the
barcode, and their banking app fills those in.
"""

import re
from typing import Dict, List, Optional

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.hub3.normalizers import CroatianAmountNormalizer
from uplatko.hub3.payment_record import (
    CURRENCY,
    DEFAULT_MODEL,
    DEFAULT_PURPOSE_CODE,
    FIELD_LIMITS,
    PartialPaymentRecord,
)

logger = get_logger(__name__)

# Banks print the IBAN with inconsistent spacing
IBAN_REGEX = re.compile(r'HR\d{2}[\s\d]{15,25}')

# Croatian number: 1.234,56 (also tolerates 1,234.56 grouping)
_NUMBER = r'(\d{1,3}(?:[.,]\d{3})*[.,]\d{2})'

# Most specific label first: amount due > grand total > total > amount
AMOUNT_PATTERNS = [
    re.compile(r'za naplatu[^\d]*' + _NUMBER, re.IGNORECASE),
    re.compile(r'sveukupno[^\d]*' + _NUMBER, re.IGNORECASE),
    re.compile(r'ukupno[^\d]*' + _NUMBER, re.IGNORECASE),
    re.compile(r'iznos[^\d]*' + _NUMBER, re.IGNORECASE),
]

# Digits, dashes and slashes on the label line, e.g. 1676-10-25
REFERENCE_REGEX = re.compile(
    r'(?:poziv na broj|poziv|reference)[^\n]*?([0-9][\d \t\-/]{3,})',
    re.IGNORECASE
)

MODEL_REGEX = re.compile(r'(?:model)[^\w]*(HR\d{2})', re.IGNORECASE)

# Text after the label on the same line, or the next line when the
# label stands alone. Same-line text wins even when a next line exists.
DESCRIPTION_REGEX = re.compile(
    r'(?:opis pla[cć]anja|opis|svrha)[\s:.\-]*([^\n]{3,35})',
    re.IGNORECASE
)

# Recipient block line classifiers
_NAME_EXCLUDED = re.compile(r'^(?:OIB|Tel|Mob|Fax|\d)')
_CURRENCY_LIKE = re.compile(r'^\d{1,3}[.,]\d{2}')
_ADDRESS_EXCLUDED = re.compile(r'^(?:OIB|IBAN)')
_POSTAL_CODE = re.compile(r'^\d{5}\s*')
_CITY_START = re.compile(r'^[A-ZŠĐČĆŽ][a-zšđčćž]')


class HeuristicExtractor:
    """
    Extracts a PartialPaymentRecord from raw invoice text.

    Deterministic and side-effect free: the same text always yields the
    same record, and extraction never raises.

    Attributes:
        lookback_lines: Lines above the IBAN searched for the recipient
        min_iban_line_index: The IBAN line index must exceed this before
                             the recipient block is trusted

    Example:
        >>> extractor = HeuristicExtractor()
        >>> record = extractor.extract(
        ...     "ACME d.o.o.\\nIlica 1\\n10000 Zagreb\\n"
        ...     "IBAN: HR1210010051863000160\\nUkupno: 100,00"
        ... )
        >>> record.recipient_city, record.amount
        ('Zagreb', 100.0)
    """

    def __init__(
        self,
        lookback_lines: Optional[int] = None,
        min_iban_line_index: Optional[int] = None
    ) -> None:
        self.lookback_lines = lookback_lines if lookback_lines is not None else \
            get_config("extraction.heuristics.recipient_lookback_lines", 4)
        self.min_iban_line_index = min_iban_line_index if min_iban_line_index is not None else \
            get_config("extraction.heuristics.recipient_min_line_index", 2)
        self.default_model = get_config("hub3.default_model", DEFAULT_MODEL)
        self.default_purpose_code = get_config(
            "hub3.default_purpose_code",
            DEFAULT_PURPOSE_CODE
        )
        self.amount_normalizer = CroatianAmountNormalizer()

    def extract(self, raw_text: Optional[str]) -> PartialPaymentRecord:
        """
        Run every sub-extraction over the text.

        Args:
            raw_text: Concatenated page text, items separated by newlines.

        Returns:
            PartialPaymentRecord; model, purpose code and currency always
            carry a value (defaults when not found).
        """
        text = raw_text or ""

        iban = self.parse_iban(text)
        recipient = self.parse_recipient(text, iban)

        record = PartialPaymentRecord(
            recipient_name=recipient.get('name'),
            recipient_address=recipient.get('address'),
            recipient_city=recipient.get('city'),
            iban=iban,
            amount=self.parse_amount(text),
            reference_number=self.parse_reference_number(text),
            model=self.parse_model(text) or self.default_model,
            description=self.parse_description(text),
            purpose_code=self.default_purpose_code,
            currency=CURRENCY,
        )

        logger.info(
            f"Heuristic extraction found {len(record.extracted_fields)} fields "
            f"(missing: {', '.join(record.missing_fields) or 'none'})"
        )
        return record

    def parse_iban(self, text: str) -> Optional[str]:
        """
        Find the recipient IBAN.

        The last match wins: the recipient's account is usually printed at
        the bottom of the invoice, below any other IBANs.
        """
        matches = IBAN_REGEX.findall(text)
        if not matches:
            return None
        return re.sub(r'\s', '', matches[-1])

    def parse_amount(self, text: str) -> Optional[float]:
        for pattern in AMOUNT_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            value = self.amount_normalizer.normalize(match.group(1))
            if value is not None:
                logger.debug(f"Amount {value} matched by '{pattern.pattern[:10]}...'")
                return value
        return None

    def parse_reference_number(self, text: str) -> Optional[str]:
        match = REFERENCE_REGEX.search(text)
        if not match:
            return None
        return match.group(1).strip() or None

    def parse_model(self, text: str) -> Optional[str]:
        match = MODEL_REGEX.search(text)
        return match.group(1).upper() if match else None

    def parse_description(self, text: str) -> Optional[str]:
        match = DESCRIPTION_REGEX.search(text)
        if not match:
            return None
        return match.group(1).strip() or None

    def parse_recipient(self, text: str, iban: Optional[str]) -> Dict[str, str]:
        """
        Read the recipient block printed just above the IBAN.

        Croatian invoices typically put the company header right above
        the account number:
            ACME d.o.o.        <- name
            Ilica 1            <- address
            10000 Zagreb       <- city (postal code dropped)
            IBAN: HR12...

        Args:
            text: Raw invoice text.
            iban: IBAN found by parse_iban(), or None.

        Returns:
            Dict with any of 'name', 'address', 'city'. Empty when there is
            no IBAN, the IBAN sits too close to the top, or no name line is
            found.
        """
        if not iban:
            return {}

        lines = [line.strip() for line in text.split("\n")]
        lines = [line for line in lines if line]

        needle = iban[:10]
        iban_index = next(
            (i for i, line in enumerate(lines) if needle in re.sub(r'\s', '', line)),
            -1
        )

        if iban_index <= self.min_iban_line_index:
            return {}

        start = max(0, iban_index - self.lookback_lines)
        candidates = lines[start:iban_index]

        name = self._find_name(candidates)
        if name is None:
            return {}

        address = next(
            (
                line for line in candidates
                if re.search(r'\d', line)
                and not _ADDRESS_EXCLUDED.match(line)
                and line != name
            ),
            None
        )

        city = None
        for line in candidates:
            if line in (name, address):
                continue
            stripped = _POSTAL_CODE.sub('', line)
            if _CITY_START.match(stripped):
                city = stripped
                break

        result = {'name': name[:FIELD_LIMITS['name']]}
        if address:
            result['address'] = address[:FIELD_LIMITS['address']]
        if city:
            result['city'] = city[:FIELD_LIMITS['city']]

        logger.debug(f"Recipient block above line {iban_index}: {result}")
        return result

    @staticmethod
    def _find_name(candidates: List[str]) -> Optional[str]:
        for line in candidates:
            if len(line) <= 2:
                continue
            if _NAME_EXCLUDED.match(line) or _CURRENCY_LIKE.match(line):
                continue
            return line
        return None


def extract(raw_text: str) -> PartialPaymentRecord:
    """Extract with a default HeuristicExtractor."""
    return HeuristicExtractor().extract(raw_text)
