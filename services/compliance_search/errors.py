"""
Search Errors
=============

Exception hierarchy for the compliance search pipeline.

Version: 0.1.0
"""


class ComplianceSearchError(Exception):
    """Base class for search pipeline errors."""


class ClassificationError(ComplianceSearchError):
    """A model classification batch returned nothing usable."""


class SearchPipelineError(ComplianceSearchError):
    """Unrecoverable failure of a search run. Carries the stage that failed."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Search failed during {stage}: {cause}")
        self.stage = stage
        self.cause = cause
