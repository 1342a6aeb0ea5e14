"""
Otimizador de orçamentos
Compara orçado vs. realizado por categoria e sugere aumentos, reduções e
novos orçamentos com um score de confiança
"""
import math
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from config import TREND_MONTHS
from ml.aggregator import category_totals, category_trend
from ml.models import (
    BudgetAction,
    Budgets,
    CategoryBudget,
    OptimizationSuggestion,
    Override,
    TransactionLike,
    Trend,
    ensure_budgets,
    ensure_transactions,
    round_half_up,
)
from utils.logger import get_logger, log_analysis

logger = get_logger(__name__)

# Regras de ajuste
OVERSPEND_BASE_CONFIDENCE = 0.5
OVERSPEND_MAX_CONFIDENCE = 0.9
UNDERSPEND_BASE_CONFIDENCE = 0.4
UNDERSPEND_MAX_CONFIDENCE = 0.8
TREND_CONFIDENCE_BONUS = 0.1
UNDERSPEND_RATIO = 0.5          # Mais da metade do orçamento sobrando
NEW_BUDGET_SHARE = 0.05         # Categoria sem orçamento com > 5% do gasto total
NEW_BUDGET_CONFIDENCE = 75


def _ceil(value: float) -> int:
    # Arredonda antes para absorver ruído binário (50 * 1.1 = 55.00000000000001)
    return math.ceil(round(value, 6))


def _floor(value: float) -> int:
    return math.floor(round(value, 6))


def _suggest_for_budget(
    budget: CategoryBudget,
    spent: float,
    trend: Trend,
    total_allocated: float
) -> Optional[OptimizationSuggestion]:
    """Aplica as regras de ajuste a um orçamento existente"""
    remaining = budget.amount - spent
    # Orçamento zerado usa denominador 1
    base = budget.amount or 1.0
    allocated_percent = budget.amount / total_allocated if total_allocated > 0 else 0.0

    if remaining < 0:
        overspent_percent = abs(remaining) / base
        confidence = min(OVERSPEND_MAX_CONFIDENCE, OVERSPEND_BASE_CONFIDENCE + overspent_percent)

        if trend is Trend.INCREASING:
            amount = _ceil(abs(remaining) * 1.2)
            confidence += TREND_CONFIDENCE_BONUS
        else:
            amount = _ceil(abs(remaining) * 1.1)

        return OptimizationSuggestion(
            category=budget.category,
            current_budget=budget.amount,
            action=BudgetAction.INCREASE,
            amount=amount,
            reason=f"consistently exceeding budget ({overspent_percent * 100:.0f}% over)",
            confidence=round_half_up(confidence * 100),
            trend=trend,
            allocated_percent=allocated_percent,
        )

    if remaining > budget.amount * UNDERSPEND_RATIO and budget.amount > 0:
        underspent_percent = remaining / budget.amount
        confidence = min(UNDERSPEND_MAX_CONFIDENCE, UNDERSPEND_BASE_CONFIDENCE + underspent_percent)

        if trend is Trend.DECREASING:
            amount = _floor(remaining * 0.7)
            confidence += TREND_CONFIDENCE_BONUS
        else:
            amount = _floor(remaining * 0.5)

        return OptimizationSuggestion(
            category=budget.category,
            current_budget=budget.amount,
            action=BudgetAction.DECREASE,
            amount=amount,
            reason=f"consistently underspending (only used {(1 - underspent_percent) * 100:.0f}%)",
            confidence=round_half_up(confidence * 100),
            trend=trend,
            allocated_percent=allocated_percent,
        )

    return None


def optimize_budgets(
    budgets: Budgets,
    transactions: Iterable[TransactionLike],
    total_income: Optional[float] = None,
    today: Optional[date] = None
) -> List[OptimizationSuggestion]:
    """
    Gera sugestões de ajuste de orçamento.

    Args:
        budgets: Mapa categoria -> orçamento (ou lista de orçamentos)
        transactions: Transações; somente despesas entram no cálculo
        total_income: Receita total do período (não altera as regras; mantido
            por compatibilidade de interface)
        today: Data de referência para transações sem data na tendência

    Returns:
        Sugestões ordenadas por confiança decrescente
    """
    budgets = ensure_budgets(budgets)
    expenses = [t for t in ensure_transactions(transactions) if t.is_expense]
    # Orçamentos com gasto manual são avaliados mesmo sem despesas
    has_override = any(isinstance(b.spent, Override) for b in budgets.values())
    if not expenses and not has_override:
        logger.debug("Sem despesas para otimizar orçamentos")
        return []

    totals = category_totals(expenses)
    trends = category_trend(expenses, months_back=TREND_MONTHS, today=today)
    total_allocated = sum(b.amount for b in budgets.values())
    total_spent = sum(a.total_amount for a in totals.values())

    suggestions: List[OptimizationSuggestion] = []

    for category, budget in budgets.items():
        computed = totals[category].total_amount if category in totals else 0.0
        suggestion = _suggest_for_budget(
            budget,
            spent=budget.resolve_spent(computed),
            trend=trends.get(category, Trend.STABLE),
            total_allocated=total_allocated,
        )
        if suggestion:
            suggestions.append(suggestion)

    # Categorias com gasto relevante e sem orçamento
    for category, aggregate in totals.items():
        if category in budgets or aggregate.total_amount <= 0:
            continue
        if aggregate.total_amount > total_spent * NEW_BUDGET_SHARE:
            suggestions.append(OptimizationSuggestion(
                category=category,
                current_budget=0.0,
                action=BudgetAction.CREATE,
                amount=_ceil(aggregate.total_amount * 1.1),
                reason="unbudgeted category with significant spending",
                confidence=NEW_BUDGET_CONFIDENCE,
                trend=trends.get(category, Trend.STABLE),
            ))

    suggestions.sort(key=lambda s: s.confidence, reverse=True)

    log_analysis(
        logger, "budgets",
        budgets=len(budgets),
        suggestions=len(suggestions),
        income=f"{total_income:.2f}" if total_income is not None else "n/a"
    )
    return suggestions


def summarize_optimizations(suggestions: List[OptimizationSuggestion]) -> Dict[str, Any]:
    """Contagem por ação e variação líquida proposta nos orçamentos"""
    increases = [s for s in suggestions if s.action is BudgetAction.INCREASE]
    decreases = [s for s in suggestions if s.action is BudgetAction.DECREASE]
    creates = [s for s in suggestions if s.action is BudgetAction.CREATE]

    return {
        'increases': len(increases),
        'decreases': len(decreases),
        'creates': len(creates),
        'net_change': (
            sum(s.amount for s in increases)
            + sum(s.amount for s in creates)
            - sum(s.amount for s in decreases)
        ),
    }


def budget_status(budgets: Budgets, transactions: Iterable[TransactionLike]) -> Dict[str, Any]:
    """
    Situação de cada orçamento: orçado, realizado e percentual usado.

    O gasto informado manualmente no orçamento tem precedência sobre o
    calculado pelas transações.

    Args:
        budgets: Mapa categoria -> orçamento (ou lista de orçamentos)
        transactions: Transações do período

    Returns:
        Dicionário com a lista por categoria e os totais
    """
    budgets = ensure_budgets(budgets)
    totals = category_totals(transactions)

    categories = []
    for category, budget in budgets.items():
        computed = totals[category].total_amount if category in totals else 0.0
        actual = budget.resolve_spent(computed)
        categories.append({
            'category': category,
            'budget': budget.amount,
            'actual': actual,
            'remaining': budget.amount - actual,
            'percent_used': actual / budget.amount * 100 if budget.amount > 0 else 0.0,
            'over_budget': actual > budget.amount,
        })

    total_budget = sum(c['budget'] for c in categories)
    total_actual = sum(c['actual'] for c in categories)

    return {
        'categories': categories,
        'total_budget': total_budget,
        'total_actual': total_actual,
        'percent_used': total_actual / total_budget * 100 if total_budget > 0 else 0.0,
    }
