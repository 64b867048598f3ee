"""
Regulations.gov Source
======================

Searches final rules through the Regulations.gov v4 document API.

The documents endpoint supports:
- Full-text search via filter[searchTerm]
- Filtering by document type and agency
- Paging and sorting

API Documentation: https://open.gsa.gov/api/regulationsgov/

Version: 0.1.0
"""

from typing import Any

from shared.config import settings
from shared.logging import get_logger
from shared.models.compliance import RuleLevel, SearchQuery
from services.compliance_search.keywords import (
    build_targeted_query,
    extract_search_terms,
    relevant_agencies,
)
from services.compliance_search.sources.base import (
    BaseSource,
    RawRule,
    SourceConfig,
    SourceResult,
)

logger = get_logger(__name__)


DOCUMENT_URL = "https://www.regulations.gov/document/{document_id}"


class RegulationsGovSource(BaseSource):
    """
    Source for federal rules published on Regulations.gov.

    Without an API key the source is disabled and returns an empty result.
    HTTP failures propagate to the caller.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        page_size: int | None = None,
        max_pages: int | None = None,
        use_agency_filter: bool | None = None,
        config: SourceConfig | None = None,
    ) -> None:
        cfg = settings.regulations_gov
        super().__init__(
            config
            or SourceConfig(min_request_interval_seconds=cfg.min_request_interval_seconds)
        )
        self.api_key = api_key if api_key is not None else cfg.api_key.get_secret_value()
        self.base_url = (base_url or cfg.base_url).rstrip("/")
        self.page_size = page_size or cfg.page_size
        self.max_pages = max(1, max_pages or cfg.max_pages)
        self.use_agency_filter = (
            cfg.use_agency_filter if use_agency_filter is None else use_agency_filter
        )

    @property
    def source_id(self) -> str:
        return "regulations"

    @property
    def source_name(self) -> str:
        return "regulations.gov"

    @property
    def authority(self) -> str:
        return "Federal Agency"

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def build_params(self, search_term: str, terms: list[str], page: int) -> dict[str, Any]:
        """Query parameters for one page of the documents endpoint."""
        params: dict[str, Any] = {
            "filter[searchTerm]": search_term,
            "filter[documentType]": "Rule",
            "page[size]": self.page_size,
            "page[number]": page,
            "sort": "-postedDate",
        }

        if self.use_agency_filter:
            params["filter[agencyId]"] = ",".join(relevant_agencies(terms))

        return params

    async def search(self, query: SearchQuery) -> SourceResult:
        """
        Search Regulations.gov for rules matching the query.

        Args:
            query: Search query; its text is reduced to a short targeted query
        """
        if not self.enabled:
            logger.warning("regulations_gov_disabled", reason="no api key")
            return SourceResult(source=self.source_id)

        terms = extract_search_terms(query.text)
        search_term = build_targeted_query(terms) or query.normalized_text

        results: list[RawRule] = []
        for page in range(1, self.max_pages + 1):
            response = await self._request(
                "GET",
                f"{self.base_url}/documents",
                params=self.build_params(search_term, terms, page),
                headers={"X-Api-Key": self.api_key},
            )

            data = response.json()
            items = data.get("data") or []
            results.extend(self.parse_document(item, query.text) for item in items)

            meta = data.get("meta") or {}
            if len(items) < self.page_size or meta.get("lastPage", True):
                break

        logger.info(
            "regulations_gov_search",
            query=search_term,
            results=len(results),
        )

        return SourceResult(source=self.source_id, results=results)

    def parse_document(self, item: dict[str, Any], search_term: str) -> RawRule:
        """Map one document record onto a raw rule."""
        attributes = item.get("attributes") or {}
        document_id = item.get("id", "")
        title = attributes.get("title") or "Untitled Rule"

        return RawRule(
            title=title,
            summary=attributes.get("summary") or title,
            authority=attributes.get("agencyId") or self.authority,
            source=self.source_name,
            source_url=DOCUMENT_URL.format(document_id=document_id),
            level=RuleLevel.FEDERAL,
            document_id=document_id or None,
            posted_date=attributes.get("postedDate"),
            search_term=search_term,
        )
