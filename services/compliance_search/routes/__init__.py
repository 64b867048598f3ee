"""
Compliance Search Routes
========================

API route handlers for the Compliance Search Service.

Routes:
- search: Compliance search and cache statistics
"""

from services.compliance_search.routes import search


__all__ = ["search"]
