from app.features.audit.services.deep_analysis.base import DeepAnalyzer
from app.features.audit.services.deep_analysis.generative import GenerativeDeepAnalyzer
from app.features.audit.services.deep_analysis.heuristic import HeuristicDeepAnalyzer
from app.platform.config import settings


def get_deep_analyzer() -> DeepAnalyzer:
    if settings.GENERATIVE_ANALYSIS_ENABLED:
        return GenerativeDeepAnalyzer()
    return HeuristicDeepAnalyzer()
