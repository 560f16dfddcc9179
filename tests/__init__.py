"""
Test suite for auction-match

Contains:
- tests/unit/          : Unit tests for individual modules and the CLI
"""
