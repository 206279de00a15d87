"""Test suite for PopStruct-Refinery.

Test organization:
- fixtures/: Mock datasets and scripted partition oracles
- unit/: Unit tests for individual modules

Run tests with:
    pytest tests/
    pytest tests/unit/
    pytest tests/ -v --tb=short
"""
