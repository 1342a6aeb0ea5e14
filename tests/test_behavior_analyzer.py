"""
Testes para o módulo de análise comportamental
"""
import pytest
import sys
from pathlib import Path
from datetime import date, timedelta

sys.path.insert(0, str(Path(__file__).parent.parent))


def _tx(day, amount=50, category='Food', type_='expense'):
    return {'date': day, 'amount': amount, 'category': category, 'type': type_}


class TestDistributions:
    """Testes para distribuições semanal e mensal"""

    def test_sunday_is_index_zero(self):
        """Testa que domingo ocupa a posição 0"""
        from behavioral.behavior_analyzer import day_of_week_distribution
        from ml.models import ensure_transactions

        # 2024-01-07 foi um domingo e 2024-01-01 uma segunda-feira
        result = day_of_week_distribution(ensure_transactions([_tx('2024-01-07'), _tx('2024-01-01')]))

        assert result[0] == pytest.approx(0.5)
        assert result[1] == pytest.approx(0.5)

    def test_day_distribution_sums_to_one(self):
        """Testa que a distribuição soma 1"""
        from behavioral.behavior_analyzer import day_of_week_distribution
        from ml.models import ensure_transactions

        start = date(2024, 1, 1)
        expenses = ensure_transactions([_tx((start + timedelta(days=i * 3)).isoformat()) for i in range(17)])

        assert sum(day_of_week_distribution(expenses)) == pytest.approx(1.0, abs=1e-9)

    def test_empty_distribution_is_zero(self):
        """Testa distribuição vazia"""
        from behavioral.behavior_analyzer import day_of_week_distribution, time_of_month_distribution

        assert day_of_week_distribution([]) == [0.0] * 7
        assert time_of_month_distribution([]) == [0.0] * 3

    def test_time_of_month_buckets(self):
        """Testa faixas 1-10, 11-20 e 21-31"""
        from behavioral.behavior_analyzer import time_of_month_distribution
        from ml.models import ensure_transactions

        expenses = ensure_transactions([
            _tx('2024-01-10'), _tx('2024-01-11'), _tx('2024-01-20'), _tx('2024-01-31'),
        ])

        assert time_of_month_distribution(expenses) == pytest.approx([0.25, 0.5, 0.25])

    def test_undated_expense_excluded(self):
        """Testa que despesas sem data ficam fora das distribuições"""
        from behavioral.behavior_analyzer import day_of_week_distribution
        from ml.models import ensure_transactions

        result = day_of_week_distribution(ensure_transactions([_tx('2024-01-01'), _tx('sem data')]))

        assert result[1] == pytest.approx(1.0)


class TestScores:
    """Testes para Gini, consistência e diversidade"""

    def test_gini_uniform(self):
        """Testa Gini zero para distribuição uniforme"""
        from behavioral.behavior_analyzer import gini_coefficient

        assert gini_coefficient([0.25, 0.25, 0.25, 0.25]) == pytest.approx(0.0)

    def test_gini_concentrated(self):
        """Testa Gini de distribuição concentrada"""
        from behavioral.behavior_analyzer import gini_coefficient

        assert gini_coefficient([1, 0, 0, 0]) == pytest.approx(0.75)

    def test_gini_empty(self):
        """Testa Gini de distribuição vazia ou zerada"""
        from behavioral.behavior_analyzer import gini_coefficient

        assert gini_coefficient([]) == 0.0
        assert gini_coefficient([0, 0, 0]) == 0.0

    def test_consistency_uniform(self):
        """Testa consistência máxima"""
        from behavioral.behavior_analyzer import consistency_score

        assert consistency_score([1 / 7] * 7, [1 / 3] * 3) == pytest.approx(1.0)

    def test_category_diversity(self):
        """Testa entropia normalizada"""
        from behavioral.behavior_analyzer import category_diversity
        from ml.models import CategoryFrequency

        single = [CategoryFrequency('Food', 10, 1.0)]
        even = [CategoryFrequency('Food', 5, 0.5), CategoryFrequency('Transport', 5, 0.5)]

        assert category_diversity(single) == 0.0
        assert category_diversity(even) == pytest.approx(1.0)

    def test_frequent_categories_order(self):
        """Testa ordenação por quantidade"""
        from behavioral.behavior_analyzer import frequent_categories
        from ml.models import ensure_transactions

        result = frequent_categories(ensure_transactions([
            _tx('2024-01-01', category='Transport'),
            _tx('2024-01-02'),
            _tx('2024-01-03'),
        ]))

        assert [c.category for c in result] == ['Food', 'Transport']
        assert result[0].frequency == pytest.approx(2 / 3)


class TestImpulseTransactions:
    """Testes para compras por impulso"""

    @pytest.fixture
    def expenses(self):
        """Nove despesas de 10 e uma de 100 no mesmo dia de outra"""
        from ml.models import ensure_transactions

        records = [_tx(f'2024-01-0{i + 1}', 10) for i in range(9)]
        records.append(_tx('2024-01-01', 100))
        return ensure_transactions(records)

    def test_detects_impulse(self, expenses):
        """Testa detecção da compra fora do padrão"""
        from behavioral.behavior_analyzer import impulse_transactions

        impulses = impulse_transactions(expenses)

        assert len(impulses) == 1
        assert impulses[0].transaction.amount == 100
        assert impulses[0].category_mean == pytest.approx(19)
        assert impulses[0].deviation == pytest.approx(3.0)

    def test_requires_shared_date(self, expenses):
        """Testa que compra isolada no dia não é impulso"""
        from behavioral.behavior_analyzer import impulse_transactions
        from ml.models import ensure_transactions

        records = [t.to_dict() for t in expenses[:9]]
        records.append(_tx('2024-01-20', 100))

        assert impulse_transactions(ensure_transactions(records)) == []

    def test_min_amount(self, expenses):
        """Testa valor mínimo"""
        from behavioral.behavior_analyzer import impulse_transactions

        assert impulse_transactions(expenses, min_amount=150) == []

    def test_identical_amounts_have_no_impulse(self):
        """Testa categoria sem variação (desvio zero)"""
        from behavioral.behavior_analyzer import impulse_transactions
        from ml.models import ensure_transactions

        expenses = ensure_transactions([_tx('2024-01-01', 40) for _ in range(5)])

        assert impulse_transactions(expenses) == []


class TestAnalyzeBehavior:
    """Testes para o perfil comportamental"""

    @pytest.fixture
    def monday_heavy(self):
        """Sete despesas em segundas-feiras e três em quartas-feiras"""
        mondays = ['2024-01-01', '2024-01-08', '2024-01-15', '2024-01-22', '2024-01-29', '2024-02-05', '2024-02-12']
        wednesdays = ['2024-01-03', '2024-01-10', '2024-01-17']
        return [_tx(d) for d in mondays + wednesdays]

    def test_insufficient_expenses(self):
        """Testa que menos de 10 despesas retorna None"""
        from behavioral.behavior_analyzer import analyze_behavior

        transactions = [_tx(f'2024-01-0{i + 1}') for i in range(9)]
        transactions += [_tx('2024-01-05', 3000, 'Salary', 'income') for _ in range(5)]

        assert analyze_behavior(transactions) is None

    def test_profile_fields(self, monday_heavy):
        """Testa campos do perfil"""
        from behavioral.behavior_analyzer import analyze_behavior

        profile = analyze_behavior(monday_heavy)

        assert profile is not None
        assert profile.day_of_week_distribution[1] == pytest.approx(0.7)
        assert profile.category_diversity == 0.0
        assert profile.impulse_ratio == 0.0
        assert 0 <= profile.behavior_score <= 100

    def test_score_formula(self, monday_heavy):
        """Testa composição do score calibrado"""
        from behavioral.behavior_analyzer import analyze_behavior

        profile = analyze_behavior(monday_heavy)
        raw = (
            profile.consistency_score * 0.3
            + profile.category_diversity * 0.3
            + (1 - profile.impulse_ratio) * 0.4
        )

        assert profile.behavior_score == pytest.approx(min(max(raw * 80, 0), 100))
        assert profile.band.value == profile.to_dict()['band']

    def test_impulse_ratio(self):
        """Testa proporção de compras por impulso"""
        from behavioral.behavior_analyzer import analyze_behavior

        records = [_tx(f'2024-01-0{i + 1}', 10) for i in range(9)]
        records.append(_tx('2024-01-01', 100))

        profile = analyze_behavior(records)

        assert profile.impulse_ratio == pytest.approx(0.1)

    def test_idempotent(self, monday_heavy):
        """Testa que duas execuções geram o mesmo perfil"""
        from behavioral.behavior_analyzer import analyze_behavior

        assert analyze_behavior(monday_heavy) == analyze_behavior(monday_heavy)


class TestDescribeBehavior:
    """Testes para o resumo legível do perfil"""

    def test_peak_day_and_period(self):
        """Testa dia e período de pico"""
        from behavioral.behavior_analyzer import analyze_behavior, describe_behavior

        mondays = ['2024-01-01', '2024-01-08', '2024-01-15', '2024-01-22', '2024-01-29', '2024-02-05', '2024-02-12']
        wednesdays = ['2024-01-03', '2024-01-10', '2024-01-17']
        profile = analyze_behavior([_tx(d) for d in mondays + wednesdays])

        summary = describe_behavior(profile, total_expenses=500)

        assert summary['peak_day'] == 'Monday'
        assert summary['peak_day_share'] == pytest.approx(0.7)
        assert summary['peak_period'] == 'Early Month (1-10)'
        assert 'beginning of the month' in summary['cash_flow_implication']
        assert summary['impulse_count'] == 0
        assert summary['impulse_share_of_expenses'] == 0.0

    def test_late_month_stress(self):
        """Testa implicação de gastos concentrados no fim do mês"""
        from behavioral.behavior_analyzer import analyze_behavior, describe_behavior

        days = [f'2024-01-{d}' for d in range(21, 31)]
        profile = analyze_behavior([_tx(d) for d in days])

        summary = describe_behavior(profile)

        assert summary['peak_period'] == 'Late Month (21-31)'
        assert 'cash flow stress' in summary['cash_flow_implication']


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
