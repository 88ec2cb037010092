"""
Test suite for funds-forwarder

Contains:
- tests/unit/          : Unit tests for ledger, assets, forwarder, factory, bridge, DAO
"""
