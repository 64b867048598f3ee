"""
Rule Sources
============

Adapters for the external systems compliance rules are fetched from.

Sources:
- Regulations.gov (federal rules, live API)
- SBA (small-business guidance, live API with canned fallback)
- IRS (tax requirements, canned catalog)
"""

from services.compliance_search.sources.base import (
    BaseSource,
    RawRule,
    SourceConfig,
    SourceResult,
)
from services.compliance_search.sources.irs import IRSSource
from services.compliance_search.sources.regulations_gov import RegulationsGovSource
from services.compliance_search.sources.sba import SBASource

__all__ = [
    "BaseSource",
    "IRSSource",
    "RawRule",
    "RegulationsGovSource",
    "SBASource",
    "SourceConfig",
    "SourceResult",
]
