"""
Ordered registry of extraction rules.

Rule order is significant: get_rule() returns the FIRST rule whose subject
matcher accepts the subject. Nothing checks that subject fragments are
disjoint, so a new rule must use a subject fragment that no earlier rule
also matches, or it will never be selected for those emails.
"""

from mail2ledger.core.logging import get_logger
from mail2ledger.extractors.base import ExtractionRule
from mail2ledger.extractors.banks import DEFAULT_RULES

log = get_logger(__name__)

# Global rule registry
_rules: list[ExtractionRule] = list(DEFAULT_RULES)


def register_rule(rule: ExtractionRule) -> ExtractionRule:
    """
    Append a rule to the registry (lowest precedence).

    Raises:
        ValueError: If a rule with the same name is already registered
    """
    if any(r.name == rule.name for r in _rules):
        raise ValueError(f"rule already registered: {rule.name}")
    _rules.append(rule)
    log.info("rule_registered", rule=rule.name)
    return rule


def get_rule(subject: str) -> ExtractionRule | None:
    """
    Get the rule for an email subject.

    Args:
        subject: Email subject line

    Returns:
        First registered rule accepting the subject, or None
    """
    for rule in _rules:
        if rule.matches(subject):
            return rule
    return None


def get_all_rules() -> list[ExtractionRule]:
    """Get all registered rules, in precedence order."""
    return _rules.copy()


def reset_rules() -> None:
    """Restore the built-in rules (for testing)."""
    _rules[:] = DEFAULT_RULES
