"""
Previsões de curto prazo para séries financeiras

Dois métodos independentes:
- Suavização exponencial simples (nível fixo, sem componente de tendência)
- Extrapolação de receitas/despesas com deriva fixa

A deriva do segundo método (+5% ao mês nas receitas, -3% ao mês nas despesas)
é uma premissa heurística declarada, e não um modelo ajustado aos dados.
"""
import math
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from config import FORECAST_PERIODS, SMOOTHING_ALPHA
from ml.models import ForecastPoint, IncomeExpenseForecast, MonthlyAggregate, parse_amount, round_half_up
from utils.logger import get_logger

logger = get_logger(__name__)

# Mínimo de pontos para qualquer previsão
MIN_POINTS = 3

INCOME_DRIFT = 0.05
EXPENSE_DRIFT = -0.03

MONTH_ABBR = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def _amount_of(item: Any) -> float:
    """
    Aceita números puros ou itens com chave 'amount'.

    Mantém o sinal: séries de poupança podem ter meses negativos.
    """
    value = item.get('amount') if isinstance(item, dict) else item
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(amount) else amount


def _field_of(item: Union[MonthlyAggregate, Dict[str, Any]], name: str) -> float:
    if isinstance(item, MonthlyAggregate):
        return getattr(item, name)
    return parse_amount(item.get(name))


def smooth_forecast(
    series: Sequence[Any],
    alpha: float = SMOOTHING_ALPHA,
    periods: int = FORECAST_PERIODS
) -> List[ForecastPoint]:
    """
    Prevê os próximos períodos por suavização exponencial.

    Todos os períodos futuros repetem o último nível suavizado, limitado
    em zero e arredondado para unidade inteira.

    Args:
        series: Valores históricos (números ou dicts com 'amount')
        alpha: Peso da observação mais recente (0 a 1)
        periods: Quantidade de períodos a prever

    Returns:
        Lista de ForecastPoint; vazia com menos de 3 pontos
    """
    if not series or len(series) < MIN_POINTS:
        logger.debug("Dados insuficientes para suavização exponencial")
        return []

    values = pd.Series([_amount_of(item) for item in series], dtype=float)
    # adjust=False reproduz a recursão s_i = alpha*x_i + (1-alpha)*s_{i-1}, s_0 = x_0
    smoothed = values.ewm(alpha=alpha, adjust=False).mean()
    level = float(smoothed.iloc[-1])

    return [
        ForecastPoint(
            label=f"Month {len(series) + i}",
            amount=max(0, round_half_up(level)),
        )
        for i in range(1, periods + 1)
    ]


def _add_months(reference: date, months: int) -> date:
    return (pd.Timestamp(reference) + pd.DateOffset(months=months)).date()


def trend_forecast(
    monthly_series: Sequence[Union[MonthlyAggregate, Dict[str, Any]]],
    periods: int = FORECAST_PERIODS,
    today: Optional[date] = None
) -> List[IncomeExpenseForecast]:
    """
    Projeta receitas e despesas dos próximos meses.

    Base: média dos últimos 3 meses. Para o passo i, receitas * (1 + 0.05*i)
    e despesas * (1 - 0.03*i), independentemente da tendência real.

    Args:
        monthly_series: Agregados mensais em ordem cronológica
        periods: Meses a projetar
        today: Âncora para os rótulos dos meses futuros

    Returns:
        Lista de IncomeExpenseForecast; vazia com menos de 3 meses
    """
    if not monthly_series or len(monthly_series) < MIN_POINTS:
        logger.debug("Dados insuficientes para projeção de receitas/despesas")
        return []

    recent = monthly_series[-MIN_POINTS:]
    avg_income = float(np.mean([_field_of(m, 'income') for m in recent]))
    avg_expenses = float(np.mean([_field_of(m, 'expenses') for m in recent]))
    logger.debug(f"Médias recentes: receitas={avg_income:.2f}, despesas={avg_expenses:.2f}")

    anchor = today or date.today()
    predictions = []
    for i in range(1, periods + 1):
        month = _add_months(anchor, i)
        predictions.append(IncomeExpenseForecast(
            label=f"{MONTH_ABBR[month.month - 1]} {month.year} (Forecast)",
            income=avg_income * (1 + INCOME_DRIFT * i),
            expenses=avg_expenses * (1 + EXPENSE_DRIFT * i),
        ))

    return predictions


def recent_average(
    monthly_series: Sequence[Union[MonthlyAggregate, Dict[str, Any]]],
    window: int = MIN_POINTS
) -> Optional[Dict[str, float]]:
    """Média de receitas, despesas e saldo dos últimos meses"""
    if not monthly_series or len(monthly_series) < window:
        return None

    recent = monthly_series[-window:]
    income = float(np.mean([_field_of(m, 'income') for m in recent]))
    expenses = float(np.mean([_field_of(m, 'expenses') for m in recent]))
    return {'income': income, 'expenses': expenses, 'net': income - expenses}


def projected_balance(predictions: Sequence[IncomeExpenseForecast]) -> Optional[Dict[str, float]]:
    """Receitas, despesas e poupança projetadas para o próximo mês"""
    if not predictions:
        return None

    next_month = predictions[0]
    return {
        'income': next_month.income,
        'expenses': next_month.expenses,
        'savings': next_month.income - next_month.expenses,
    }
