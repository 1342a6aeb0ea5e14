"""
Testes para o módulo de agregações
"""
import pytest
import sys
from pathlib import Path
from datetime import date

sys.path.insert(0, str(Path(__file__).parent.parent))


def _tx(day, amount, category='Food', type_='expense'):
    return {'date': day, 'amount': amount, 'category': category, 'type': type_}


class TestMonthlyTotals:
    """Testes para totais mensais"""

    @pytest.fixture
    def sample_transactions(self):
        """Transações espalhadas em três meses, fora de ordem"""
        return [
            _tx('2024-03-02', 3000, 'Salary', 'income'),
            _tx('2024-01-10', 120),
            _tx('2024-02-15', 80, 'Transport'),
            _tx('2024-01-05', 2800, 'Salary', 'income'),
            _tx('2024-03-20', 200),
            _tx('2024-02-01', 2900, 'Salary', 'income'),
            _tx('2024-01-25', 45.5, 'Leisure'),
        ]

    def test_empty_input(self):
        """Testa entrada vazia"""
        from ml.aggregator import monthly_totals

        assert monthly_totals([]) == []

    def test_sorted_by_period(self, sample_transactions):
        """Testa ordenação crescente por período"""
        from ml.aggregator import monthly_totals

        result = monthly_totals(sample_transactions)
        periods = [m.period for m in result]

        assert periods == ['2024-01', '2024-02', '2024-03']
        assert periods == sorted(periods)

    def test_sums_match_input(self, sample_transactions):
        """Testa conservação dos totais de receitas e despesas"""
        from ml.aggregator import monthly_totals

        result = monthly_totals(sample_transactions)

        assert sum(m.income for m in result) == pytest.approx(3000 + 2800 + 2900)
        assert sum(m.expenses for m in result) == pytest.approx(120 + 80 + 200 + 45.5)

    def test_monthly_values(self, sample_transactions):
        """Testa valores de um mês específico"""
        from ml.aggregator import monthly_totals

        january = monthly_totals(sample_transactions)[0]

        assert january.income == pytest.approx(2800)
        assert january.expenses == pytest.approx(165.5)
        assert january.net == pytest.approx(2634.5)

    def test_undated_transaction_goes_to_reference_month(self):
        """Testa que transação sem data não some dos totais"""
        from ml.aggregator import monthly_totals

        result = monthly_totals(
            [_tx('2024-01-10', 100), _tx('data ruim', 50)],
            today=date(2024, 5, 20)
        )

        assert [m.period for m in result] == ['2024-01', '2024-05']
        assert result[1].expenses == pytest.approx(50)


class TestCategoryTotals:
    """Testes para agregação por categoria"""

    def test_groups_expenses_only(self):
        """Testa que receitas ficam fora do filtro padrão"""
        from ml.aggregator import category_totals

        totals = category_totals([
            _tx('2024-01-01', 10),
            _tx('2024-01-02', 15),
            _tx('2024-01-03', 30, 'Transport'),
            _tx('2024-01-04', 1000, 'Salary', 'income'),
        ])

        assert set(totals) == {'Food', 'Transport'}
        assert totals['Food'].total_amount == pytest.approx(25)
        assert totals['Food'].count == 2
        assert len(totals['Food'].transactions) == 2

    def test_income_filter(self):
        """Testa filtro por receitas"""
        from ml.aggregator import category_totals
        from ml.models import TransactionType

        totals = category_totals(
            [_tx('2024-01-01', 10), _tx('2024-01-04', 1000, 'Salary', 'income')],
            type_filter=TransactionType.INCOME
        )

        assert list(totals) == ['Salary']


class TestCategoryTrend:
    """Testes para tendência por categoria"""

    def test_single_month_returns_empty(self):
        """Testa que menos de 2 meses não gera tendência"""
        from ml.aggregator import category_trend

        assert category_trend([_tx('2024-01-01', 10), _tx('2024-01-20', 30)]) == {}

    def test_increasing(self):
        """Testa gastos crescentes"""
        from ml.aggregator import category_trend
        from ml.models import Trend

        trends = category_trend([
            _tx('2024-01-10', 100),
            _tx('2024-02-10', 150),
            _tx('2024-03-10', 200),
        ])

        assert trends['Food'] is Trend.INCREASING

    def test_decreasing(self):
        """Testa gastos decrescentes"""
        from ml.aggregator import category_trend
        from ml.models import Trend

        trends = category_trend([
            _tx('2024-01-10', 300, 'Transport'),
            _tx('2024-02-10', 200, 'Transport'),
            _tx('2024-03-10', 100, 'Transport'),
        ])

        assert trends['Transport'] is Trend.DECREASING

    def test_tie_has_no_entry(self):
        """Testa que empate entre altas e baixas não gera entrada"""
        from ml.aggregator import category_trend

        trends = category_trend([
            _tx('2024-01-10', 100),
            _tx('2024-02-10', 200),
            _tx('2024-03-10', 100),
        ])

        assert 'Food' not in trends

    def test_missing_month_counts_as_zero(self):
        """Testa categoria ausente em um mês"""
        from ml.aggregator import category_trend
        from ml.models import Trend

        trends = category_trend([
            _tx('2024-01-10', 100, 'Transport'),
            _tx('2024-02-10', 50),
            _tx('2024-03-10', 60, 'Transport'),
        ])

        # Transport: 100 -> 0 -> 60 (uma alta e uma baixa)
        assert 'Transport' not in trends
        # Food: 0 -> 50 -> 0
        assert 'Food' not in trends
        assert Trend.STABLE not in trends.values()

    def test_only_recent_months(self):
        """Testa que só os meses mais recentes entram na comparação"""
        from ml.aggregator import category_trend
        from ml.models import Trend

        trends = category_trend([
            _tx('2024-01-10', 1000),
            _tx('2024-02-10', 100),
            _tx('2024-03-10', 200),
            _tx('2024-04-10', 300),
        ], months_back=3)

        assert trends['Food'] is Trend.INCREASING


class TestTotalsByType:
    """Testes para o recálculo de receitas e despesas"""

    def test_totals(self):
        """Testa soma por tipo"""
        from ml.aggregator import totals_by_type

        income, expenses = totals_by_type([
            _tx('2024-01-01', 1000, 'Salary', 'income'),
            _tx('2024-01-02', 200),
            _tx('2024-01-03', 50),
        ])

        assert income == pytest.approx(1000)
        assert expenses == pytest.approx(250)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
