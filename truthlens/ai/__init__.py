"""truthlens.ai – hosted-model analyzers."""
from .chat_model import AssistantService
from .content_model import AnalysisResult, ContentAnalyzer, FactCheck, risk_level
from .gemini_client import GeminiClient
from .graph_model import EntityGraphExtractor, parse_graph

__all__ = [
    "AssistantService",
    "AnalysisResult",
    "ContentAnalyzer",
    "FactCheck",
    "risk_level",
    "GeminiClient",
    "EntityGraphExtractor",
    "parse_graph",
]
