"""
Extraction rule definition.

A rule is data, not code: a subject classifier plus two regexes. Adding a
bank template means adding an ExtractionRule to the registry.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from email.utils import parsedate_to_datetime
from typing import Callable

from mail2ledger.core.errors import ParseError
from mail2ledger.core.models import Message, Transaction

EMAIL_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S %z"

# "Fri, 14 Nov 2025 20:59:28 +0530 (IST)" -> "Fri, 14 Nov 2025 20:59:28 +0530"
_ZONE_NAME_SUFFIX = re.compile(r"\s*\([^()]*\)\s*$")


def subject_contains(fragment: str) -> Callable[[str], bool]:
    """Subject matcher accepting any subject that contains fragment (case-sensitive)."""

    def _matcher(subject: str) -> bool:
        return fragment in subject

    return _matcher


@dataclass(frozen=True)
class ExtractionRule:
    """One bank email template."""

    name: str
    subject_matcher: Callable[[str], bool]
    amount_pattern: re.Pattern
    description_pattern: re.Pattern

    def matches(self, subject: str) -> bool:
        return self.subject_matcher(subject)

    def extract_amount(self, body: str) -> Decimal:
        """
        Amount captured by amount_pattern, or zero when the pattern does not match.

        Raises:
            ParseError: If the captured text is not a number
        """
        match = self.amount_pattern.search(body)
        if not match:
            return Decimal(0)
        raw = match.group(1)
        try:
            return Decimal(raw.replace(",", ""))
        except InvalidOperation as e:
            raise ParseError(f"failed to parse amount: {raw!r}") from e

    def extract_description(self, body: str) -> str:
        """First non-empty capture group of description_pattern, trimmed."""
        match = self.description_pattern.search(body)
        if not match:
            return ""
        for group in match.groups():
            if group:
                return group.strip()
        return ""

    def parse(self, message: Message) -> Transaction:
        """
        Build a Transaction from a message whose subject this rule accepted.

        Raises:
            ParseError: If amount or description is missing, or the date is unparseable
        """
        amount = self.extract_amount(message.body)
        description = self.extract_description(message.body)

        if amount == 0 or not description:
            missing = []
            if amount == 0:
                missing.append("amount")
            if not description:
                missing.append("description")
            raise ParseError(
                f"failed to parse transaction details ({self.name}): missing {', '.join(missing)}"
            )

        return Transaction(
            amount=amount,
            description=description,
            transaction_date=normalize_date(message.date),
        )


def normalize_date(raw: str) -> str:
    """
    Convert an email Date header to YYYY-MM-DD in the header's own offset.

    Raises:
        ParseError: If the header cannot be parsed
    """
    value = _ZONE_NAME_SUFFIX.sub("", raw or "").strip()
    try:
        parsed = datetime.strptime(value, EMAIL_DATE_FORMAT)
    except ValueError:
        # Headers without a weekday or with a two-digit year
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            parsed = None
    if parsed is None:
        raise ParseError(f"failed to parse date: {raw!r}")
    return parsed.strftime("%Y-%m-%d")
