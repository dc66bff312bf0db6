"""
Bank notification email to ledger sync.

Polls a Gmail mailbox for bank alert emails and:
- Decodes message bodies into plain text
- Extracts transactions using per-bank pattern rules
- Forwards each transaction to the ledger service
- Tracks progress with a persisted cursor so restarts resume cleanly
"""

__version__ = "1.0.0"
