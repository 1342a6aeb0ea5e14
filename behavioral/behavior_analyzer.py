"""
Análise comportamental de gastos
Distribuição semanal e mensal, compras por impulso e score de comportamento
"""
from collections import Counter, defaultdict
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from config import IMPULSE_MIN_AMOUNT
from ml.models import (
    BehaviorProfile,
    CategoryFrequency,
    ImpulseTransaction,
    Transaction,
    TransactionLike,
    ensure_transactions,
)
from utils.logger import get_logger, log_alert, log_analysis

logger = get_logger(__name__)

MIN_EXPENSES = 10
MIN_CATEGORY_POINTS = 3
IMPULSE_STD_MULTIPLIER = 1.5

# Calibração que mantém scores típicos longe dos extremos
SCORE_SCALE = 80

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
MONTH_PERIODS = ['Early Month (1-10)', 'Mid Month (11-20)', 'Late Month (21-31)']


def _normalize(counts: np.ndarray) -> List[float]:
    total = counts.sum()
    if total == 0:
        return [0.0] * len(counts)
    return [float(c) for c in counts / total]


def day_of_week_distribution(expenses: List[Transaction]) -> List[float]:
    """Proporção de despesas por dia da semana (0=domingo .. 6=sábado)"""
    counts = np.zeros(7)
    for t in expenses:
        if t.date is not None:
            # weekday(): 0=segunda; deslocamos para 0=domingo
            counts[(t.date.weekday() + 1) % 7] += 1
    return _normalize(counts)


def time_of_month_distribution(expenses: List[Transaction]) -> List[float]:
    """Proporção de despesas no início (1-10), meio (11-20) e fim (21-31) do mês"""
    counts = np.zeros(3)
    for t in expenses:
        if t.date is None:
            continue
        if t.date.day <= 10:
            counts[0] += 1
        elif t.date.day <= 20:
            counts[1] += 1
        else:
            counts[2] += 1
    return _normalize(counts)


def frequent_categories(expenses: List[Transaction]) -> List[CategoryFrequency]:
    """Categorias ordenadas por número de despesas"""
    if not expenses:
        return []
    counts = Counter(t.category for t in expenses)
    return [
        CategoryFrequency(category=category, count=count, frequency=count / len(expenses))
        for category, count in counts.most_common()
    ]


def impulse_transactions(
    expenses: List[Transaction],
    min_amount: float = IMPULSE_MIN_AMOUNT
) -> List[ImpulseTransaction]:
    """
    Identifica prováveis compras por impulso.

    Uma despesa é marcada quando divide a data com outra despesa, fica acima
    de média + 1.5 desvios da sua categoria e supera o valor mínimo.

    Args:
        expenses: Despesas a analisar
        min_amount: Valor absoluto mínimo para considerar impulso

    Returns:
        Lista ordenada por desvio decrescente
    """
    by_category: Dict[str, List[Transaction]] = defaultdict(list)
    per_date: Counter = Counter()
    for t in expenses:
        by_category[t.category].append(t)
        if t.date is not None:
            per_date[t.date] += 1

    impulses: List[ImpulseTransaction] = []
    for category, items in by_category.items():
        if len(items) < MIN_CATEGORY_POINTS:
            continue

        amounts = np.array([t.amount for t in items])
        mean = float(amounts.mean())
        std = float(amounts.std())  # desvio populacional
        if std == 0:
            continue

        for t in items:
            shares_date = t.date is not None and per_date[t.date] > 1
            if shares_date and t.amount > mean + IMPULSE_STD_MULTIPLIER * std and t.amount > min_amount:
                impulses.append(ImpulseTransaction(
                    transaction=t,
                    category_mean=mean,
                    deviation=(t.amount - mean) / std,
                ))

    impulses.sort(key=lambda i: i.deviation, reverse=True)
    return impulses


def gini_coefficient(distribution: Iterable[float]) -> float:
    """
    Coeficiente de Gini de uma distribuição (0 = uniforme).

    Fórmula ponderada por posição sobre a distribuição ordenada.
    """
    values = np.sort(np.asarray(list(distribution), dtype=float))
    n = len(values)
    total = values.sum()
    if n == 0 or total == 0:
        return 0.0

    ranks = np.arange(1, n + 1)
    return float((2 * np.sum(values * ranks)) / (n * total) - (n + 1) / n)


def consistency_score(day_distribution: List[float], month_distribution: List[float]) -> float:
    """Média entre (1 - Gini) semanal e (1 - Gini) mensal"""
    return (1 - gini_coefficient(day_distribution)) * 0.5 + (1 - gini_coefficient(month_distribution)) * 0.5


def category_diversity(categories: List[CategoryFrequency]) -> float:
    """Entropia de Shannon normalizada por log2(n categorias)"""
    if len(categories) <= 1:
        return 0.0

    frequencies = np.array([c.frequency for c in categories if c.frequency > 0])
    entropy = float(-np.sum(frequencies * np.log2(frequencies)))
    return entropy / float(np.log2(len(categories)))


def analyze_behavior(transactions: Iterable[TransactionLike]) -> Optional[BehaviorProfile]:
    """
    Monta o perfil comportamental a partir das despesas.

    Args:
        transactions: Lista de transações

    Returns:
        BehaviorProfile, ou None com menos de 10 despesas (dados insuficientes)
    """
    expenses = [t for t in ensure_transactions(transactions) if t.is_expense]
    if len(expenses) < MIN_EXPENSES:
        logger.debug(f"Dados insuficientes para análise comportamental ({len(expenses)} despesas)")
        return None

    day_distribution = day_of_week_distribution(expenses)
    month_distribution = time_of_month_distribution(expenses)
    categories = frequent_categories(expenses)
    impulses = impulse_transactions(expenses)

    consistency = consistency_score(day_distribution, month_distribution)
    diversity = category_diversity(categories)
    impulse_ratio = len(impulses) / len(expenses)

    raw_score = consistency * 0.3 + diversity * 0.3 + (1 - impulse_ratio) * 0.4
    behavior_score = min(max(raw_score * SCORE_SCALE, 0.0), 100.0)

    log_analysis(
        logger, "behavior",
        consistency=round(consistency * 100),
        diversity=round(diversity * 100),
        impulse_control=round((1 - impulse_ratio) * 100),
        score=round(behavior_score, 1)
    )
    for impulse in impulses[:3]:
        log_alert(
            logger,
            alert_type="impulse",
            message=f"{impulse.transaction.category}: {impulse.transaction.amount:.2f} em {impulse.transaction.date}",
            score=impulse.deviation
        )

    return BehaviorProfile(
        day_of_week_distribution=day_distribution,
        time_of_month_distribution=month_distribution,
        frequent_categories=categories,
        impulse_transactions=impulses,
        consistency_score=consistency,
        category_diversity=diversity,
        impulse_ratio=impulse_ratio,
        behavior_score=behavior_score,
    )


def _cash_flow_implication(month_distribution: List[float]) -> str:
    early, mid, late = month_distribution
    if late > early:
        return "You spend more at the end of the month, which may indicate cash flow stress."
    if early > mid and early > late:
        return "You front-load spending at the beginning of the month, which can help with budgeting."
    return "Your spending is fairly balanced throughout the month."


def describe_behavior(
    profile: BehaviorProfile,
    total_expenses: Optional[float] = None
) -> Dict[str, Any]:
    """
    Resume o perfil em indicadores legíveis.

    Args:
        profile: Perfil gerado por analyze_behavior
        total_expenses: Total de despesas para calcular a fatia das compras por impulso

    Returns:
        Dicionário com dia e período de pico, implicação no fluxo de caixa e
        totais de impulso
    """
    day_distribution = profile.day_of_week_distribution
    month_distribution = profile.time_of_month_distribution

    peak_day = int(np.argmax(day_distribution))
    peak_period = int(np.argmax(month_distribution))
    impulse_total = sum(i.transaction.amount for i in profile.impulse_transactions)

    return {
        'peak_day': DAY_NAMES[peak_day],
        'peak_day_share': day_distribution[peak_day],
        'day_distribution_score': round((1 - gini_coefficient(day_distribution)) * 100),
        'peak_period': MONTH_PERIODS[peak_period],
        'peak_period_share': month_distribution[peak_period],
        'cash_flow_implication': _cash_flow_implication(month_distribution),
        'impulse_count': len(profile.impulse_transactions),
        'impulse_total': impulse_total,
        'impulse_share_of_expenses': impulse_total / total_expenses if total_expenses else 0.0,
        'band': profile.band.value,
    }
