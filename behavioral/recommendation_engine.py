"""
Motor de recomendações financeiras
Combina taxa de poupança, análise comportamental e dicas fixas em uma lista
priorizada de recomendações
"""
from typing import Iterable, List, Optional

from behavioral.behavior_analyzer import analyze_behavior
from config import INCLUDE_DEMO_RECOMMENDATIONS
from ml.aggregator import totals_by_type
from ml.models import (
    BehaviorProfile,
    Budgets,
    Priority,
    Recommendation,
    TransactionLike,
    ensure_budgets,
    ensure_transactions,
)
from utils.logger import get_logger, log_analysis

logger = get_logger(__name__)

MIN_TRANSACTIONS = 5

# Limiares de comportamento
IMPULSE_RATIO_LIMIT = 0.1
CONSISTENCY_LIMIT = 0.4
DIVERSITY_LIMIT = 0.5

ADD_MORE_DATA = Recommendation(
    type='basic',
    title='Add More Data',
    description='Add more transaction data to receive personalized recommendations.',
    priority=Priority.HIGH,
    actionable=True,
    action='Track your expenses for at least one month to unlock insights.',
    confidence=99,
)

# Recomendações fixas de demonstração, iguais para todos os usuários
DEMO_RECOMMENDATIONS = [
    Recommendation(
        type='demo',
        title='Consider Reviewing Your Purchases',
        description='Based on your transaction patterns, you might find where you are wasting money on unnecessary items.',
        priority=Priority.MEDIUM,
        actionable=True,
        action='Explore your transactions and find any spending that is not needed.',
        confidence=45,
    ),
    Recommendation(
        type='demo',
        title='Review Subscription Services',
        description='You have several recurring subscription payments that might not be fully utilized.',
        priority=Priority.LOW,
        actionable=True,
        action="Audit your subscription services and cancel those you don't regularly use.",
        confidence=88,
    ),
]


def savings_recommendation(income: float, expenses: float) -> Optional[Recommendation]:
    """
    Classifica a taxa de poupança em três faixas fixas.

    Args:
        income: Receita total
        expenses: Despesa total

    Returns:
        Recomendação da faixa, ou None sem receita
    """
    if income <= 0:
        return None

    savings_rate = (income - expenses) / income
    rate_text = f"{savings_rate * 100:.1f}%"

    if savings_rate < 0.1:
        return Recommendation(
            type='saving',
            title='Increase Savings Rate',
            description=f"Your current savings rate is {rate_text}, which is below the recommended minimum of 10%.",
            priority=Priority.HIGH,
            actionable=True,
            action='Aim to save at least 10% of your income by reducing expenses or increasing income.',
            confidence=92,
        )
    if savings_rate < 0.2:
        return Recommendation(
            type='saving',
            title='Boost Savings Rate',
            description=f"Your current savings rate is {rate_text}, which is good but could be improved.",
            priority=Priority.MEDIUM,
            actionable=True,
            action='Consider increasing your savings rate to 20% to build stronger financial security.',
            confidence=75,
        )
    return Recommendation(
        type='saving',
        title='Maintain Strong Savings',
        description=f"Your savings rate of {rate_text} is excellent! You're saving more than the recommended 20%.",
        priority=Priority.LOW,
        actionable=False,
        action='Consider investing some of your savings for long-term growth.',
        confidence=85,
    )


def behavior_recommendations(profile: BehaviorProfile) -> List[Recommendation]:
    """Conselhos derivados do perfil comportamental"""
    recommendations = []

    if profile.impulse_ratio > IMPULSE_RATIO_LIMIT:
        recommendations.append(Recommendation(
            type='behavior',
            title='Reduce Impulse Purchases',
            description=(
                f"Our analysis identified that {profile.impulse_ratio * 100:.0f}% of your "
                f"transactions appear to be impulse purchases."
            ),
            priority=Priority.MEDIUM,
            actionable=True,
            action='Try implementing a 24-hour waiting period before making non-essential purchases.',
            confidence=67,
        ))

    if profile.consistency_score < CONSISTENCY_LIMIT:
        recommendations.append(Recommendation(
            type='behavior',
            title='Improve Spending Consistency',
            description='Your spending patterns show significant variability, which can make budgeting difficult.',
            priority=Priority.MEDIUM,
            actionable=True,
            action='Try to spread your spending more evenly throughout the month to avoid cash flow issues.',
        ))

    if profile.category_diversity < DIVERSITY_LIMIT:
        recommendations.append(Recommendation(
            type='diversity',
            title='Review Spending Allocation',
            description='Your spending is concentrated in a limited number of categories.',
            priority=Priority.LOW,
            actionable=True,
            action='Review your budget allocation to ensure it aligns with your financial goals and priorities.',
        ))

    return recommendations


def generate_recommendations(
    transactions: Iterable[TransactionLike],
    budgets: Optional[Budgets] = None,
    income: Optional[float] = None,
    expenses: Optional[float] = None,
    profile: Optional[BehaviorProfile] = None,
    include_demo: bool = INCLUDE_DEMO_RECOMMENDATIONS
) -> List[Recommendation]:
    """
    Gera recomendações priorizadas.

    Args:
        transactions: Lista de transações
        budgets: Orçamentos por categoria (hoje não alteram as regras)
        income: Receita total; recalculada das transações se omitida
        expenses: Despesa total; recalculada das transações se omitida
        profile: Perfil comportamental já calculado (evita recálculo)
        include_demo: Anexa as duas recomendações fixas de demonstração

    Returns:
        Recomendações ordenadas por prioridade (alta > média > baixa),
        preservando a ordem de geração nos empates
    """
    transactions = ensure_transactions(transactions)
    if len(transactions) < MIN_TRANSACTIONS:
        return [ADD_MORE_DATA]

    if income is None or expenses is None:
        computed_income, computed_expenses = totals_by_type(transactions)
        income = computed_income if income is None else income
        expenses = computed_expenses if expenses is None else expenses

    recommendations: List[Recommendation] = []

    saving = savings_recommendation(income, expenses)
    if saving:
        recommendations.append(saving)

    if profile is None:
        profile = analyze_behavior(transactions)
    if profile:
        recommendations.extend(behavior_recommendations(profile))

    if include_demo:
        recommendations.extend(DEMO_RECOMMENDATIONS)

    recommendations.sort(key=lambda r: r.priority.weight, reverse=True)

    log_analysis(
        logger, "recommendations",
        total=len(recommendations),
        high=sum(1 for r in recommendations if r.priority is Priority.HIGH),
        budgets=len(ensure_budgets(budgets))
    )
    return recommendations
