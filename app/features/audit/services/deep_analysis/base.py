from abc import ABC, abstractmethod

from app.features.audit.schemas.audit import AuditResult
from app.features.audit.schemas.deep_analysis import DeepAnalysis


class DeepAnalyzer(ABC):
    """Produces the expert report attached to an audit as ``llm_analysis``."""

    name: str = "base"

    @abstractmethod
    async def analyze(self, audit: AuditResult, page_content: str) -> DeepAnalysis:
        """Must always return a complete DeepAnalysis; never raises."""
