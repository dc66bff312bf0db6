"""
Built-in bank email templates.

Amounts may carry Indian thousands separators (Rs.1,23,456.00); the
separators are dropped before parsing.
"""

import re

from mail2ledger.extractors.base import ExtractionRule, subject_contains

# "Rs.250.00 has been debited from account **1234 to VPA foo@okbank JOHN DOE on 01-01-24."
HDFC_UPI = ExtractionRule(
    name="hdfc_upi",
    subject_matcher=subject_contains("You have done a UPI txn"),
    amount_pattern=re.compile(r"Rs\.([\d,]+(?:\.\d+)?) has been debited"),
    description_pattern=re.compile(r"to VPA\s+\S+\s+(.+?)\s+on\s+"),
)

# "Rs.1,499.00 is debited from your HDFC Bank Credit Card ending 1234 towards AMAZON PAY on 02 Jan, 2024"
HDFC_CREDIT_CARD = ExtractionRule(
    name="hdfc_credit_card",
    subject_matcher=subject_contains("debited via Credit Card"),
    amount_pattern=re.compile(r"Rs\.([\d,]+(?:\.\d+)?) is debited from"),
    description_pattern=re.compile(r"towards\s+([^\s]+(?:\s+[^\s]+)*?)\s+on\s+"),
)

# Card spends: "... INR 450.00 on 03-01-2024 at VS/123/10:22:01/CAFE COFFEE DAY ."
# Account debits: "... INR 450.00 on 03-01-2024 on account of NEFT-ABC. Available balance ..."
DCB_BANK = ExtractionRule(
    name="dcb_bank",
    subject_matcher=subject_contains("DCB Bank email alert: Account debit intimation"),
    amount_pattern=re.compile(r"INR\s+([\d,]+\.?\d*)\s+on"),
    description_pattern=re.compile(
        r"(?:at\s+VS/\d+/[\d:]+/(.+?)\s+\.|on account of (.+?)\.\s+Available)"
    ),
)

DEFAULT_RULES: tuple[ExtractionRule, ...] = (HDFC_UPI, HDFC_CREDIT_CARD, DCB_BANK)
