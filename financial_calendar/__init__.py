"""
Financial Calendar - Source Package

Date logic for a personal finance application: financial periods anchored
to a user-configurable month start day, relative date-range filtering of
transactions, and projection of recurring debts and receivables.

DESIGN PRINCIPLES:
1. Pure functions over in-memory data, no I/O in the core
2. Dates are built from local calendar fields, never parsed through UTC
3. Bad input fails loudly at the model boundary
4. Projections are virtual and can never be mutated as stored records
5. Collaborators (profile store, audit sink, cache) are injected
"""

__version__ = "1.0.0"
__author__ = "Financial Calendar Team"
