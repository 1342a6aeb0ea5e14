"""
Módulos analíticos do motor de insights

- Aggregator: Totais mensais, por categoria e tendências
- Forecaster: Suavização exponencial e projeção de receitas/despesas
- AnomalyDetector: Despesas fora do padrão por IQR da categoria
- BudgetOptimizer: Sugestões de ajuste de orçamento

O pipeline completo (que também usa os módulos comportamentais) fica em
ml.insights.run_insights.
"""
from ml.aggregator import category_totals, category_trend, monthly_totals, totals_by_type
from ml.anomaly_detector import detect_anomalies, get_anomaly_summary
from ml.budget_optimizer import budget_status, optimize_budgets, summarize_optimizations
from ml.forecaster import projected_balance, recent_average, smooth_forecast, trend_forecast

__all__ = [
    # Agregações
    "monthly_totals",
    "category_totals",
    "category_trend",
    "totals_by_type",
    # Previsões
    "smooth_forecast",
    "trend_forecast",
    "recent_average",
    "projected_balance",
    # Anomalias
    "detect_anomalies",
    "get_anomaly_summary",
    # Orçamentos
    "optimize_budgets",
    "summarize_optimizations",
    "budget_status",
]
