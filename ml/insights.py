"""
Pipeline completo de insights

Executa todas as análises sobre o mesmo conjunto de transações e devolve um
relatório único, pronto para ser serializado para o dashboard.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from behavioral.behavior_analyzer import analyze_behavior, describe_behavior
from behavioral.recommendation_engine import generate_recommendations
from config import ANOMALY_SENSITIVITY
from ml.aggregator import category_totals, monthly_totals, totals_by_type
from ml.anomaly_detector import detect_anomalies, get_anomaly_summary
from ml.budget_optimizer import budget_status, optimize_budgets, summarize_optimizations
from ml.forecaster import projected_balance, recent_average, smooth_forecast, trend_forecast
from ml.models import (
    Anomaly,
    BehaviorProfile,
    Budgets,
    ForecastPoint,
    IncomeExpenseForecast,
    MonthlyAggregate,
    OptimizationSuggestion,
    Recommendation,
    Sensitivity,
    TransactionLike,
    ensure_budgets,
    ensure_transactions,
)
from utils.logger import get_logger, log_analysis

logger = get_logger(__name__)


@dataclass
class InsightsReport:
    """Resultado de uma execução do pipeline"""

    total_income: float
    total_expenses: float
    monthly: List[MonthlyAggregate] = field(default_factory=list)
    income_expense_forecast: List[IncomeExpenseForecast] = field(default_factory=list)
    recent_average: Optional[Dict[str, float]] = None
    projected_balance: Optional[Dict[str, float]] = None
    savings_forecast: List[ForecastPoint] = field(default_factory=list)
    anomalies: List[Anomaly] = field(default_factory=list)
    anomaly_summary: Dict[str, Any] = field(default_factory=dict)
    behavior: Optional[BehaviorProfile] = None
    behavior_summary: Optional[Dict[str, Any]] = None
    category_breakdown: List[Dict[str, Any]] = field(default_factory=list)
    budget_suggestions: List[OptimizationSuggestion] = field(default_factory=list)
    budget_summary: Dict[str, Any] = field(default_factory=dict)
    budget_status: Dict[str, Any] = field(default_factory=dict)
    recommendations: List[Recommendation] = field(default_factory=list)

    @property
    def net_savings(self) -> float:
        return self.total_income - self.total_expenses

    @property
    def savings_rate(self) -> float:
        if self.total_income <= 0:
            return 0.0
        return self.net_savings / self.total_income

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_income': self.total_income,
            'total_expenses': self.total_expenses,
            'net_savings': self.net_savings,
            'savings_rate': self.savings_rate,
            'monthly': [m.to_dict() for m in self.monthly],
            'income_expense_forecast': [p.to_dict() for p in self.income_expense_forecast],
            'recent_average': self.recent_average,
            'projected_balance': self.projected_balance,
            'savings_forecast': [p.to_dict() for p in self.savings_forecast],
            'anomalies': [a.to_dict() for a in self.anomalies],
            'anomaly_summary': self.anomaly_summary,
            'behavior': self.behavior.to_dict() if self.behavior else None,
            'behavior_summary': self.behavior_summary,
            'category_breakdown': self.category_breakdown,
            'budget_suggestions': [s.to_dict() for s in self.budget_suggestions],
            'budget_summary': self.budget_summary,
            'budget_status': self.budget_status,
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


def category_breakdown(transactions: Iterable[TransactionLike]) -> List[Dict[str, Any]]:
    """
    Despesas por categoria, da maior para a menor.

    Returns:
        Lista de dicts com categoria, valor, quantidade e fatia do total
    """
    totals = category_totals(transactions)
    grand_total = sum(a.total_amount for a in totals.values())

    breakdown = [
        {
            'category': category,
            'value': aggregate.total_amount,
            'count': aggregate.count,
            'share': aggregate.total_amount / grand_total if grand_total > 0 else 0.0,
        }
        for category, aggregate in totals.items()
    ]
    breakdown.sort(key=lambda item: item['value'], reverse=True)
    return breakdown


def run_insights(
    transactions: Iterable[TransactionLike],
    budgets: Optional[Budgets] = None,
    sensitivity: Union[Sensitivity, str] = ANOMALY_SENSITIVITY,
    savings: Optional[Sequence[Any]] = None,
    today: Optional[date] = None
) -> InsightsReport:
    """
    Executa o pipeline completo de análises.

    Nenhuma etapa guarda estado entre execuções: a mesma entrada gera
    sempre o mesmo relatório.

    Args:
        transactions: Transações (Transaction ou dicts crus)
        budgets: Orçamentos por categoria
        sensitivity: Sensibilidade da detecção de anomalias
        savings: Série histórica de poupança; se omitida, usa o saldo mensal
        today: Data de referência para rótulos e transações sem data

    Returns:
        InsightsReport com todos os resultados
    """
    transactions = ensure_transactions(transactions)
    budgets = ensure_budgets(budgets)
    total_income, total_expenses = totals_by_type(transactions)

    monthly = monthly_totals(transactions, today=today)
    predictions = trend_forecast(monthly, today=today)

    savings_series = list(savings) if savings is not None else [m.net for m in monthly]

    anomalies = detect_anomalies(transactions, sensitivity=sensitivity)

    profile = analyze_behavior(transactions)
    behavior_summary = describe_behavior(profile, total_expenses) if profile else None

    suggestions: List[OptimizationSuggestion] = []
    status: Dict[str, Any] = {}
    if budgets:
        suggestions = optimize_budgets(budgets, transactions, total_income=total_income, today=today)
        status = budget_status(budgets, transactions)

    recommendations = generate_recommendations(
        transactions,
        budgets=budgets,
        income=total_income,
        expenses=total_expenses,
        profile=profile,
    )

    report = InsightsReport(
        total_income=total_income,
        total_expenses=total_expenses,
        monthly=monthly,
        income_expense_forecast=predictions,
        recent_average=recent_average(monthly),
        projected_balance=projected_balance(predictions),
        savings_forecast=smooth_forecast(savings_series),
        anomalies=anomalies,
        anomaly_summary=get_anomaly_summary(anomalies, transactions),
        behavior=profile,
        behavior_summary=behavior_summary,
        category_breakdown=category_breakdown(transactions),
        budget_suggestions=suggestions,
        budget_summary=summarize_optimizations(suggestions),
        budget_status=status,
        recommendations=recommendations,
    )

    log_analysis(
        logger, "insights",
        transactions=len(transactions),
        months=len(monthly),
        anomalies=len(anomalies),
        suggestions=len(suggestions),
        recommendations=len(recommendations)
    )
    return report
