"""
Gift Calculator - Ledger Engine

Derives every read model of the gift calculator from one append-only,
human-readable text log.

DESIGN PRINCIPLES:
1. The ledger text is the single source of truth
2. Hand-edited lines are tolerated, never fatal
3. Currencies are never blended without an explicit conversion
4. Budget periods never overlap
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Gift Calculator Team"
