"""
Test suite for the Range Market Engine

Contains:
- tests/unit/          : Unit tests for the pricing core, services and routes
"""
