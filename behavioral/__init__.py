"""
Módulos comportamentais do motor de insights

- BehaviorAnalyzer: Distribuição de gastos, compras por impulso e score
- RecommendationEngine: Recomendações priorizadas de poupança e comportamento
"""
from behavioral.behavior_analyzer import analyze_behavior, describe_behavior
from behavioral.recommendation_engine import (
    generate_recommendations,
    savings_recommendation,
    behavior_recommendations
)

__all__ = [
    "analyze_behavior",
    "describe_behavior",
    "generate_recommendations",
    "savings_recommendation",
    "behavior_recommendations"
]
