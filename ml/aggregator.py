"""
Agregações de transações por mês e por categoria
Base para previsões, tendências e otimização de orçamentos
"""
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from ml.models import (
    CategoryAggregate,
    MonthlyAggregate,
    Transaction,
    TransactionLike,
    TransactionType,
    Trend,
    ensure_transactions,
)
from utils.logger import get_logger, log_analysis

logger = get_logger(__name__)


def period_key(transaction: Transaction, today: Optional[date] = None) -> str:
    """
    Retorna a chave YYYY-MM da transação.

    Transações sem data válida vão para o mês corrente para não sumirem
    dos totais.
    """
    reference = transaction.date or today or date.today()
    return reference.strftime('%Y-%m')


def monthly_totals(
    transactions: Iterable[TransactionLike],
    today: Optional[date] = None
) -> List[MonthlyAggregate]:
    """
    Soma receitas e despesas por mês.

    Args:
        transactions: Lista de transações
        today: Data de referência para transações sem data

    Returns:
        Um MonthlyAggregate por mês, em ordem crescente de período
    """
    transactions = ensure_transactions(transactions)
    if not transactions:
        return []

    df = pd.DataFrame({
        'period': [period_key(t, today) for t in transactions],
        'income': [t.amount if t.is_income else 0.0 for t in transactions],
        'expenses': [0.0 if t.is_income else t.amount for t in transactions],
    })
    monthly = df.groupby('period', sort=True)[['income', 'expenses']].sum()

    result = [
        MonthlyAggregate(period=str(period), income=float(row['income']), expenses=float(row['expenses']))
        for period, row in monthly.iterrows()
    ]
    log_analysis(logger, "monthly", months=len(result), transactions=len(transactions))
    return result


def category_totals(
    transactions: Iterable[TransactionLike],
    type_filter: TransactionType = TransactionType.EXPENSE
) -> Dict[str, CategoryAggregate]:
    """Agrupa transações do tipo informado por categoria"""
    totals: Dict[str, CategoryAggregate] = {}
    for t in ensure_transactions(transactions):
        if t.type is not type_filter:
            continue
        aggregate = totals.setdefault(t.category, CategoryAggregate(category=t.category))
        aggregate.total_amount += t.amount
        aggregate.count += 1
        aggregate.transactions.append(t)
    return totals


def category_trend(
    transactions: Iterable[TransactionLike],
    months_back: int = 3,
    type_filter: TransactionType = TransactionType.EXPENSE,
    today: Optional[date] = None
) -> Dict[str, Trend]:
    """
    Identifica a tendência de gastos de cada categoria nos meses recentes.

    Compara meses consecutivos e a direção majoritária vence. Empates não
    geram entrada; quem consome trata ausência como estável.

    Args:
        transactions: Lista de transações
        months_back: Quantidade de meses distintos mais recentes
        type_filter: Tipo de transação considerado
        today: Data de referência para transações sem data

    Returns:
        Mapa categoria -> Trend
    """
    by_month: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    for t in ensure_transactions(transactions):
        if t.type is type_filter:
            by_month[period_key(t, today)][t.category] += t.amount

    recent_months = sorted(by_month, reverse=True)[:months_back]
    if len(recent_months) < 2:
        return {}
    recent_months.reverse()

    categories: List[str] = []
    for month in recent_months:
        for category in by_month[month]:
            if category not in categories:
                categories.append(category)

    trends: Dict[str, Trend] = {}
    for category in categories:
        amounts = [by_month[month].get(category, 0.0) for month in recent_months]
        ups = sum(1 for older, newer in zip(amounts, amounts[1:]) if newer > older)
        downs = sum(1 for older, newer in zip(amounts, amounts[1:]) if newer < older)

        if ups > downs:
            trends[category] = Trend.INCREASING
        elif downs > ups:
            trends[category] = Trend.DECREASING

    return trends


def totals_by_type(transactions: Iterable[TransactionLike]) -> Tuple[float, float]:
    """Recalcula (receitas, despesas) a partir das próprias transações"""
    income = 0.0
    expenses = 0.0
    for t in ensure_transactions(transactions):
        if t.is_income:
            income += t.amount
        else:
            expenses += t.amount
    return income, expenses
