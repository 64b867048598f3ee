"""
Compliance Search Service
=========================

Real-time compliance rule search across government sources.

Features:
- Parallel fetch from Regulations.gov, SBA and IRS with per-source timeout
- Canonical deduplication of overlapping rules
- Heuristic and language-model relevance classification
- Six-hour result cache with request coalescing

Port: 8010
"""

__version__ = "0.1.0"
