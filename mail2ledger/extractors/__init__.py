"""
Transaction extraction from bank notification emails.
"""

from typing import Sequence

from mail2ledger.core.errors import ParseError
from mail2ledger.core.logging import get_logger
from mail2ledger.core.models import ExtractionKind, ExtractionResult, Message
from mail2ledger.extractors.base import ExtractionRule, normalize_date, subject_contains
from mail2ledger.extractors.registry import get_all_rules, get_rule, register_rule, reset_rules

log = get_logger(__name__)


def classify_and_extract(
    message: Message,
    rules: Sequence[ExtractionRule] | None = None,
) -> ExtractionResult:
    """
    Classify a message by subject and extract its transaction.

    Args:
        message: Decoded message
        rules: Rules to use instead of the registry, in precedence order

    Returns:
        ExtractionResult. NOT_A_TRANSACTION when no rule accepts the subject,
        PARSE_ERROR when a rule matched but the body or date did not.
    """
    if rules is None:
        rule = get_rule(message.subject)
    else:
        rule = next((r for r in rules if r.matches(message.subject)), None)

    if rule is None:
        return ExtractionResult(kind=ExtractionKind.NOT_A_TRANSACTION)

    try:
        transaction = rule.parse(message)
    except ParseError as e:
        log.warning("extraction_failed", rule=rule.name, subject=message.subject, error=str(e))
        return ExtractionResult(kind=ExtractionKind.PARSE_ERROR, rule_name=rule.name, error=str(e))

    return ExtractionResult(
        kind=ExtractionKind.TRANSACTION,
        rule_name=rule.name,
        transaction=transaction,
    )


__all__ = [
    "ExtractionRule",
    "classify_and_extract",
    "get_all_rules",
    "get_rule",
    "normalize_date",
    "register_rule",
    "reset_rules",
    "subject_contains",
]
