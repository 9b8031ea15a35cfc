"""
InvestTrack - Source Package

A personal investment tracker for people who lend capital to customers
and collect it back in instalments.

DESIGN PRINCIPLES:
1. One explicit state container owns all data
2. Every change is written back immediately
3. Deletes cascade so no orphaned records survive
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "InvestTrack Team"
