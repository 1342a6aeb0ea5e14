"""
Modelos de dados do motor de insights

Todos os tipos derivados são valores efêmeros: recalculados a cada execução
do pipeline e nunca persistidos.
"""
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from numbers import Number
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from config import DEFAULT_CATEGORY
from utils.logger import get_logger

logger = get_logger(__name__)


class TransactionType(Enum):
    """Tipos de transação"""
    INCOME = "income"
    EXPENSE = "expense"


class Sensitivity(Enum):
    """Sensibilidade da detecção de anomalias"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def multiplier(self) -> float:
        """Multiplicador do IQR usado nos limites"""
        return {"low": 3.0, "medium": 2.0, "high": 1.5}[self.value]

    @classmethod
    def parse(cls, value: Union["Sensitivity", str, None]) -> "Sensitivity":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.warning(f"Sensibilidade desconhecida '{value}', usando 'medium'")
            return cls.MEDIUM


class AnomalyKind(Enum):
    HIGH = "high"
    LOW = "low"


class Trend(Enum):
    """Direção de gastos de uma categoria nos últimos meses"""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class BudgetAction(Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    CREATE = "create"


class Priority(Enum):
    """Prioridade de uma recomendação"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class ScoreBand(Enum):
    """Faixas documentadas do score comportamental"""
    EXCELLENT = "excellent"   # >= 80
    GOOD = "good"             # >= 60
    FAIR = "fair"             # >= 40
    NEEDS_WORK = "needs-work"

    @classmethod
    def from_score(cls, score: float) -> "ScoreBand":
        if score >= 80:
            return cls.EXCELLENT
        if score >= 60:
            return cls.GOOD
        if score >= 40:
            return cls.FAIR
        return cls.NEEDS_WORK


# === Conversões tolerantes ===

def parse_amount(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Converte um valor monetário para float não negativo.

    O sinal é descartado (a direção fica no tipo da transação);
    valores não numéricos devolvem `default`.
    """
    if isinstance(value, bool):
        return default
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(amount) or math.isinf(amount):
        return default
    return abs(amount)


ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def parse_date(value: Any) -> Optional[date]:
    """
    Converte datas ISO (YYYY-MM-DD ou data-hora) para date.

    Returns:
        A data do calendário, ou None se o valor não for interpretável
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    # Só aceita texto começando em YYYY-MM-DD; evita "now"/"today" virarem a data atual
    if not ISO_DATE.match(text):
        return None

    parsed = pd.to_datetime(text, errors='coerce')
    if pd.isna(parsed):
        return None
    return parsed.date()


def round_half_up(value: float) -> int:
    """Arredondamento comercial (0.5 sobe), diferente do round() bancário"""
    return int(math.floor(value + 0.5))


# === Entidades ===

@dataclass(frozen=True)
class Transaction:
    """Transação financeira (somente leitura para o motor)"""

    id: Optional[str]
    date: Optional[date]
    description: str
    amount: float
    type: TransactionType
    category: str

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Transaction":
        """
        Cria uma transação a partir de um registro cru, sem descartar nada.

        Campos inválidos recebem valores seguros: valor -> 0.0,
        categoria -> DEFAULT_CATEGORY, tipo -> expense, data -> None.
        """
        amount = parse_amount(data.get("amount"), default=None)
        if amount is None:
            logger.warning(f"Valor inválido na transação {data.get('id')}: {data.get('amount')!r}")
            amount = 0.0

        category = data.get("category")
        if category is None or not str(category).strip():
            category = DEFAULT_CATEGORY

        raw_type = str(data.get("type", "")).strip().lower()
        try:
            transaction_type = TransactionType(raw_type)
        except ValueError:
            logger.warning(f"Tipo desconhecido na transação {data.get('id')}: {raw_type!r}")
            transaction_type = TransactionType.EXPENSE

        transaction_date = parse_date(data.get("date"))
        if transaction_date is None:
            logger.warning(f"Data inválida na transação {data.get('id')}: {data.get('date')!r}")

        raw_id = data.get("id")
        return cls(
            id=str(raw_id) if raw_id is not None else None,
            date=transaction_date,
            description=str(data.get("description") or ""),
            amount=amount,
            type=transaction_type,
            category=str(category),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "description": self.description,
            "amount": self.amount,
            "type": self.type.value,
            "category": self.category,
        }


@dataclass(frozen=True)
class Override:
    """Gasto informado manualmente no orçamento"""
    amount: float


@dataclass(frozen=True)
class Computed:
    """Gasto calculado a partir das transações"""


ActualSpend = Union[Override, Computed]


@dataclass(frozen=True)
class CategoryBudget:
    """Orçamento de uma categoria"""

    category: str
    amount: float
    spent: ActualSpend = field(default_factory=Computed)

    def resolve_spent(self, computed: float) -> float:
        """O valor manual, quando existe, tem precedência sobre o calculado"""
        if isinstance(self.spent, Override):
            return self.spent.amount
        return computed

    @classmethod
    def from_dict(cls, category: str, data: Mapping[str, Any]) -> "CategoryBudget":
        spent: ActualSpend = Computed()
        if data.get("spent") is not None:
            spent = Override(parse_amount(data["spent"]))
        return cls(
            category=str(data.get("category") or category),
            amount=parse_amount(data.get("amount")),
            spent=spent,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {"category": self.category, "amount": self.amount}
        if isinstance(self.spent, Override):
            data["spent"] = self.spent.amount
        return data


@dataclass(frozen=True)
class MonthlyAggregate:
    period: str  # YYYY-MM
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses

    def to_dict(self) -> Dict[str, Any]:
        return {"period": self.period, "income": self.income, "expenses": self.expenses}


@dataclass
class CategoryAggregate:
    category: str
    total_amount: float = 0.0
    count: int = 0
    transactions: List[Transaction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "total_amount": self.total_amount,
            "count": self.count,
            "transaction_ids": [t.id for t in self.transactions],
        }


@dataclass(frozen=True)
class ForecastPoint:
    label: str
    amount: int
    predicted: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "amount": self.amount, "predicted": self.predicted}


@dataclass(frozen=True)
class IncomeExpenseForecast:
    label: str
    income: float
    expenses: float
    predicted: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "income": self.income,
            "expenses": self.expenses,
            "predicted": self.predicted,
        }


@dataclass(frozen=True)
class Anomaly:
    """Transação de despesa fora do padrão da própria categoria"""

    transaction: Transaction
    score: float
    kind: AnomalyKind
    deviation: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.transaction.to_dict(),
            "score": self.score,
            "kind": self.kind.value,
            "deviation": self.deviation,
        }


@dataclass(frozen=True)
class ImpulseTransaction:
    transaction: Transaction
    category_mean: float
    deviation: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.transaction.to_dict(),
            "category_mean": self.category_mean,
            "deviation": self.deviation,
        }


@dataclass(frozen=True)
class CategoryFrequency:
    category: str
    count: int
    frequency: float

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "count": self.count, "frequency": self.frequency}


@dataclass(frozen=True)
class BehaviorProfile:
    """Perfil comportamental de gastos"""

    day_of_week_distribution: List[float]   # 0=domingo .. 6=sábado
    time_of_month_distribution: List[float]  # início, meio, fim do mês
    frequent_categories: List[CategoryFrequency]
    impulse_transactions: List[ImpulseTransaction]
    consistency_score: float
    category_diversity: float
    impulse_ratio: float
    behavior_score: float

    @property
    def band(self) -> ScoreBand:
        return ScoreBand.from_score(self.behavior_score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_of_week_distribution": list(self.day_of_week_distribution),
            "time_of_month_distribution": list(self.time_of_month_distribution),
            "frequent_categories": [c.to_dict() for c in self.frequent_categories],
            "impulse_transactions": [t.to_dict() for t in self.impulse_transactions],
            "consistency_score": self.consistency_score,
            "category_diversity": self.category_diversity,
            "impulse_ratio": self.impulse_ratio,
            "behavior_score": self.behavior_score,
            "band": self.band.value,
        }


@dataclass(frozen=True)
class OptimizationSuggestion:
    """Sugestão de ajuste de orçamento"""

    category: str
    current_budget: float
    action: BudgetAction
    amount: int
    reason: str
    confidence: int  # 0-100
    trend: Trend
    allocated_percent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "current_budget": self.current_budget,
            "action": self.action.value,
            "amount": self.amount,
            "reason": self.reason,
            "confidence": self.confidence,
            "trend": self.trend.value,
            "allocated_percent": self.allocated_percent,
        }


@dataclass(frozen=True)
class Recommendation:
    type: str
    title: str
    description: str
    priority: Priority
    actionable: bool
    action: str
    confidence: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "actionable": self.actionable,
            "action": self.action,
        }
        # Remove None para respostas JSON mais limpas
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data


# === Normalização de entradas ===

TransactionLike = Union[Transaction, Mapping[str, Any]]
BudgetLike = Union[CategoryBudget, Mapping[str, Any]]
Budgets = Union[Mapping[str, BudgetLike], Iterable[BudgetLike]]


def ensure_transactions(transactions: Optional[Iterable[TransactionLike]]) -> List[Transaction]:
    """
    Aceita Transaction ou dicionários crus e devolve sempre Transaction.

    Itens que não são registros (None, números, textos) são ignorados com aviso.
    """
    if not transactions:
        return []

    result = []
    for t in transactions:
        if isinstance(t, Transaction):
            result.append(t)
        elif isinstance(t, Mapping):
            result.append(Transaction.from_dict(t))
        else:
            logger.warning(f"Registro de transação inválido ignorado: {t!r}")
    return result


def _budget_from_value(category: str, data: Any) -> Optional[CategoryBudget]:
    if isinstance(data, CategoryBudget):
        return data
    # Valor numérico solto equivale a {'amount': valor}
    if isinstance(data, Number) and not isinstance(data, bool):
        return CategoryBudget.from_dict(category, {"amount": data})
    if isinstance(data, Mapping):
        return CategoryBudget.from_dict(category, data)
    logger.warning(f"Orçamento inválido para '{category}' ignorado: {data!r}")
    return None


def ensure_budgets(
    budgets: Optional[Budgets]
) -> Dict[str, CategoryBudget]:
    """
    Normaliza orçamentos para um mapa categoria -> CategoryBudget.

    Aceita tanto o mapa {categoria: {amount, spent}} (ou {categoria: valor})
    quanto uma lista de registros com campo 'category'.
    """
    if not budgets:
        return {}

    result: Dict[str, CategoryBudget] = {}
    if isinstance(budgets, Mapping):
        for category, data in budgets.items():
            budget = _budget_from_value(str(category), data)
            if budget is not None:
                result[str(category)] = budget
        return result

    for data in budgets:
        if isinstance(data, CategoryBudget):
            result[data.category] = data
            continue
        if not isinstance(data, Mapping) or not data.get("category"):
            logger.warning(f"Orçamento sem categoria ignorado: {data!r}")
            continue
        category = str(data["category"])
        result[category] = CategoryBudget.from_dict(category, data)
    return result
