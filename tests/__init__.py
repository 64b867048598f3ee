"""
Compliance Search Test Suite
============================

Test organization:
- tests/unit/                        - Shared layers (config, logging, LLM, models)
- tests/services/compliance_search/  - Search engine and HTTP routes

All tests run offline: external sources and language models are stubbed.

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
"""
