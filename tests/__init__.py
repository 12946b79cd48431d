"""
Unit Tests for BitBlue

This package contains unit tests for all chess engine components.

Running Tests:
    # Run all tests
    pytest tests/

    # Skip the deeper perft counts
    pytest tests/ -m "not slow"

    # Run specific test file
    pytest tests/test_movegen.py

    # Run with coverage
    pytest tests/ --cov=bitblue --cov-report=html

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
    - python-chess: Reference move generator for cross-checks
"""
