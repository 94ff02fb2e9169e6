"""
Lendbook - Source Package

A personal lending and debt ledger: money lent to borrowers, money
borrowed from creditors, and the payments recorded against each.

DESIGN PRINCIPLES:
1. Balances and statuses are derived, never stored
2. Interest terms are fixed when an obligation is created
3. Payments are append-only
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Lendbook Team"
