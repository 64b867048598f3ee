"""
IRS Source
==========

Federal tax requirements. The IRS has no public rule-search API, so this
source answers from a canned catalog triggered by query terms.

Version: 0.1.0
"""

from shared.models.compliance import SearchQuery
from services.compliance_search.sources.base import BaseSource, SourceResult
from services.compliance_search.sources.catalog import IRS_CATALOG, build_rules


class IRSSource(BaseSource):
    """Keyword-triggered IRS tax rules."""

    @property
    def source_id(self) -> str:
        return "irs"

    @property
    def source_name(self) -> str:
        return "irs.gov"

    @property
    def authority(self) -> str:
        return "Internal Revenue Service"

    async def search(self, query: SearchQuery) -> SourceResult:
        results = build_rules(IRS_CATALOG, query.text, self.authority, self.source_name)
        return SourceResult(source=self.source_id, results=results)
