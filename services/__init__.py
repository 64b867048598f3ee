"""
Compliance Search Services
==========================

Services built on the shared configuration, logging and model layers.

Services:
- compliance_search: Real-time compliance rule search and classification
"""

__all__ = [
    "compliance_search",
]
