"""
Core domain models, error taxonomy and event contracts.

This module contains the building blocks that are independent of any
particular ledger (addresses, states, events, reason strings).
"""
