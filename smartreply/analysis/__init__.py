"""Context analysis: relevance scoring, entities, heuristic and AI analyzers."""

from smartreply.analysis.ai import AIContextAnalyzer
from smartreply.analysis.entities import categorize_entities, extract_entities
from smartreply.analysis.heuristic import HeuristicContextAnalyzer, analyze_context
from smartreply.analysis.scoring import calculate_relevance_score, score_messages

__all__ = [
    "AIContextAnalyzer",
    "HeuristicContextAnalyzer",
    "analyze_context",
    "calculate_relevance_score",
    "categorize_entities",
    "extract_entities",
    "score_messages",
]
