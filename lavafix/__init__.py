"""
LavaFix - Source Package

A small recurring-billing ledger for an appliance repair service:
clients who owe a monthly fee, the payments they make, and an
audit trail of every change.

DESIGN PRINCIPLES:
1. The ledger is the only source of truth for money
2. Every mutation is written through immediately
3. Destructive actions are previewed before they are committed
4. Every mutation leaves a notification behind
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "LavaFix Team"
