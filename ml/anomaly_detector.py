"""
Detector de anomalias em transações financeiras
Usa limites por intervalo interquartil (IQR) dentro de cada categoria
"""
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Union

import numpy as np

from config import ANOMALY_SENSITIVITY
from ml.models import Anomaly, AnomalyKind, Sensitivity, Transaction, TransactionLike, ensure_transactions
from utils.logger import get_logger, log_alert, log_analysis

logger = get_logger(__name__)

# Mínimos de amostra
MIN_TRANSACTIONS = 5
MIN_EXPENSES = 5
MIN_CATEGORY_POINTS = 3


def quartiles(amounts: List[float]) -> tuple:
    """
    Q1 e Q3 por posição simples no vetor ordenado (sem interpolação).

    Args:
        amounts: Valores da categoria (não precisam estar ordenados)

    Returns:
        Tupla (q1, q3)
    """
    ordered = np.sort(np.asarray(amounts, dtype=float))
    n = len(ordered)
    return float(ordered[int(n * 0.25)]), float(ordered[int(n * 0.75)])


def _detect_in_category(items: List[Transaction], multiplier: float) -> List[Anomaly]:
    amounts = [t.amount for t in items]
    mean = float(np.mean(amounts))
    q1, q3 = quartiles(amounts)

    # IQR zero (valores idênticos) vira 1 para limites e score
    iqr = (q3 - q1) or 1.0
    threshold = multiplier * iqr
    upper_bound = q3 + threshold
    lower_bound = q1 - threshold

    anomalies = []
    for t in items:
        if t.amount > upper_bound:
            kind = AnomalyKind.HIGH
        elif t.amount < lower_bound and lower_bound > 0:
            kind = AnomalyKind.LOW
        else:
            continue

        deviation = abs(t.amount - mean)
        anomalies.append(Anomaly(
            transaction=t,
            score=deviation / iqr,
            kind=kind,
            deviation=deviation,
        ))
    return anomalies


def detect_anomalies(
    transactions: Iterable[TransactionLike],
    sensitivity: Union[Sensitivity, str] = ANOMALY_SENSITIVITY
) -> List[Anomaly]:
    """
    Detecta despesas fora do padrão da própria categoria.

    Args:
        transactions: Lista de transações (somente despesas são avaliadas)
        sensitivity: low, medium ou high (multiplicador 3, 2 ou 1.5 do IQR)

    Returns:
        Anomalias ordenadas por score decrescente
    """
    transactions = ensure_transactions(transactions)
    if len(transactions) < MIN_TRANSACTIONS:
        logger.debug("Poucas transações para detecção de anomalias")
        return []

    expenses = [t for t in transactions if t.is_expense]
    if len(expenses) < MIN_EXPENSES:
        logger.debug("Poucas despesas para detecção de anomalias")
        return []

    sensitivity = Sensitivity.parse(sensitivity)

    by_category: Dict[str, List[Transaction]] = defaultdict(list)
    for t in expenses:
        by_category[t.category].append(t)

    anomalies: List[Anomaly] = []
    for category, items in by_category.items():
        if len(items) < MIN_CATEGORY_POINTS:
            continue
        anomalies.extend(_detect_in_category(items, sensitivity.multiplier))

    anomalies.sort(key=lambda a: a.score, reverse=True)

    log_analysis(
        logger, "anomalies",
        sensitivity=sensitivity.value,
        expenses=len(expenses),
        detected=len(anomalies)
    )
    for anomaly in anomalies[:3]:
        log_alert(
            logger,
            alert_type="anomaly",
            message=f"{anomaly.transaction.category}: {anomaly.transaction.amount:.2f} ({anomaly.kind.value})",
            score=anomaly.score
        )

    return anomalies


def get_anomaly_summary(
    anomalies: List[Anomaly],
    transactions: Iterable[TransactionLike]
) -> Dict[str, Any]:
    """
    Gera resumo das anomalias detectadas.

    Args:
        anomalies: Resultado de detect_anomalies
        transactions: Transações analisadas

    Returns:
        Dicionário com estatísticas
    """
    expense_count = sum(1 for t in ensure_transactions(transactions) if t.is_expense)

    if not anomalies:
        return {
            'total_anomalies': 0,
            'percentage': 0,
            'total_value': 0,
            'categories': {},
            'largest': None
        }

    categories: Dict[str, Dict[str, float]] = {}
    for a in anomalies:
        cat = categories.setdefault(a.transaction.category, {'count': 0, 'total': 0.0})
        cat['count'] += 1
        cat['total'] += a.transaction.amount

    largest = max(anomalies, key=lambda a: a.transaction.amount)

    return {
        'total_anomalies': len(anomalies),
        'percentage': len(anomalies) / expense_count * 100 if expense_count else 0,
        'total_value': sum(a.transaction.amount for a in anomalies),
        'categories': categories,
        'largest': largest.to_dict()
    }
