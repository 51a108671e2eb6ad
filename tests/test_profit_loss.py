"""Tests for the profit & loss calculator."""

from datetime import date, datetime

import pytest

from marginpilot.analyzers.profit_loss import (
    PeriodFigures,
    ProfitLossCalculator,
    is_waste_mirror,
    transaction_category,
)
from marginpilot.models.records import (
    Expense,
    ExpenseCadence,
    ExpenseTransaction,
    IngredientUsage,
    MealPrepSession,
    Payroll,
    PayrollStatus,
    ReportDataset,
    Sale,
    SaleItem,
    SaleStatus,
    WasteRecord,
)

JUNE_START = date(2025, 6, 1)
JUNE_END = date(2025, 6, 30)


@pytest.fixture
def dataset() -> ReportDataset:
    return ReportDataset(
        sales=[
            Sale(
                id="s1",
                timestamp=datetime(2025, 6, 2, 12, 0),
                items=[
                    SaleItem(menu_item_id="burger", quantity=2, price=15.0, cost=6.0),
                    SaleItem(menu_item_id="special", quantity=1, price=10.0),
                ],
            ),
            Sale(
                id="s2",
                timestamp=datetime(2025, 6, 3, 19, 0),
                items=[SaleItem(menu_item_id="burger", quantity=1, price=15.0, cost=6.0)],
            ),
            Sale(
                id="void",
                timestamp=datetime(2025, 6, 3, 20, 0),
                status=SaleStatus.CANCELLED,
                items=[SaleItem(menu_item_id="burger", quantity=5, price=15.0, cost=6.0)],
            ),
            Sale(
                id="may",
                timestamp=datetime(2025, 5, 31, 20, 0),
                items=[SaleItem(menu_item_id="burger", quantity=5, price=15.0, cost=6.0)],
            ),
        ],
        expenses=[
            Expense(id="rent", name="Rent", category="Rent", amount=3000, cadence=ExpenseCadence.MONTHLY,
                    start_date=date(2025, 1, 1)),
        ],
        expense_transactions=[
            ExpenseTransaction(id="t1", date=date(2025, 6, 5), amount=200, category="REPAIRS"),
            ExpenseTransaction(id="t2", date=date(2025, 6, 6), amount=50, category="OTHER"),
            ExpenseTransaction(id="t3", date=date(2025, 6, 7), amount=80, notes="Manual stock adjustment: flour"),
            ExpenseTransaction(id="t4", date=date(2025, 6, 8), amount=40, notes="Waste record: spoiled milk"),
            ExpenseTransaction(id="t5", date=date(2025, 7, 1), amount=999, category="REPAIRS"),
        ],
        waste_records=[WasteRecord(id="w1", date=date(2025, 6, 8), cost=40, reason="spoiled milk")],
        payrolls=[
            Payroll(id="p1", period=date(2025, 6, 15), total_paid=1200, status=PayrollStatus.PAID),
            Payroll(id="p2", period=date(2025, 6, 30), total_paid=1300, status=PayrollStatus.PENDING),
            Payroll(id="p3", period=date(2025, 5, 31), total_paid=1100, status=PayrollStatus.PAID),
        ],
        meal_prep_sessions=[
            MealPrepSession(
                id="mp1",
                prep_date=date(2025, 6, 2),
                usages=[IngredientUsage(ingredient_id="beef", quantity_used=4, cost_per_unit=5.0)],
            )
        ],
    )


class TestTransactionClassification:
    def test_waste_mirror(self) -> None:
        tx = ExpenseTransaction(date=date(2025, 6, 1), amount=1, notes="Waste record: bread")
        assert is_waste_mirror(tx)
        assert not is_waste_mirror(ExpenseTransaction(date=date(2025, 6, 1), amount=1))

    def test_categories(self) -> None:
        assert transaction_category(ExpenseTransaction(date=JUNE_START, amount=1, notes="COGS top-up")) == "COGS"
        assert transaction_category(ExpenseTransaction(date=JUNE_START, amount=1, category="OTHER")) == "Other"
        assert transaction_category(ExpenseTransaction(date=JUNE_START, amount=1, category="REPAIRS")) == "REPAIRS"

    def test_deliveries(self) -> None:
        delivery = ExpenseTransaction(date=JUNE_START, amount=1, category="INVENTORY_PURCHASE")
        assert transaction_category(delivery) == "COGS (Deliveries)"
        adjustment = ExpenseTransaction(
            date=JUNE_START, amount=1, category="INVENTORY_PURCHASE", notes="Manual stock adjustment: flour"
        )
        assert transaction_category(adjustment) == "COGS"

    def test_deliveries_in_breakdown(self) -> None:
        dataset = ReportDataset(
            expense_transactions=[
                ExpenseTransaction(id="d1", date=date(2025, 6, 3), amount=120, category="INVENTORY_PURCHASE"),
                ExpenseTransaction(id="d2", date=date(2025, 6, 9), amount=30, category="INVENTORY_PURCHASE"),
            ]
        )
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        assert figures.expense_by_category == pytest.approx({"COGS (Deliveries)": 150})
        assert figures.one_off_expenses == pytest.approx(150)
        assert figures.cogs == 0


class TestPeriodFigures:
    def test_revenue_and_cogs(self, dataset: ReportDataset) -> None:
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        assert figures.order_count == 2
        assert figures.revenue == pytest.approx(55.0)
        assert figures.cogs_from_sales == pytest.approx(18.0)
        assert figures.cogs_from_meal_prep == pytest.approx(20.0)
        assert figures.cogs == pytest.approx(38.0)
        assert figures.gross_profit == pytest.approx(17.0)

    def test_operating_expenses(self, dataset: ReportDataset) -> None:
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        assert figures.recurring_expenses == pytest.approx(3000)
        # waste mirror t4 and July t5 are not counted
        assert figures.one_off_expenses == pytest.approx(330)
        assert figures.waste == pytest.approx(40)
        assert figures.operating_expenses == pytest.approx(3370)

    def test_category_breakdown_sums_to_operating_expenses(self, dataset: ReportDataset) -> None:
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        assert figures.expense_by_category == pytest.approx(
            {"Rent": 3000, "REPAIRS": 200, "Other": 50, "COGS": 80, "Waste": 40}
        )
        assert sum(figures.expense_by_category.values()) == pytest.approx(figures.operating_expenses)

    def test_payroll_paid_in_period_only(self, dataset: ReportDataset) -> None:
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        assert figures.payroll == pytest.approx(1200)

    def test_net_profit(self, dataset: ReportDataset) -> None:
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        assert figures.net_profit == pytest.approx(55 - 38 - 3370 - 1200)
        assert figures.net_margin == pytest.approx(figures.net_profit / 55 * 100)
        assert figures.food_cost_percent == pytest.approx(38 / 55 * 100)

    def test_cogs_coverage(self, dataset: ReportDataset) -> None:
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        # 45 of 55 revenue carries a cost snapshot
        assert figures.cogs_coverage_percent == 82

    def test_empty(self) -> None:
        figures = ProfitLossCalculator.period_figures(ReportDataset(), JUNE_START, JUNE_END)
        assert figures.revenue == 0
        assert figures.net_profit == 0
        assert figures.net_margin == 0.0
        assert figures.food_cost_percent == 0.0
        assert figures.cogs_coverage_percent == 100
        assert figures.expense_by_category == {}

    def test_defaults(self) -> None:
        assert PeriodFigures().cogs == 0.0


class TestDailySeries:
    def test_dense(self, dataset: ReportDataset) -> None:
        days = ProfitLossCalculator.daily_series(dataset, JUNE_START, date(2025, 6, 10))
        assert len(days) == 10
        assert days[0].date == JUNE_START
        assert days[-1].date == date(2025, 6, 10)

    def test_totals_match_period(self, dataset: ReportDataset) -> None:
        days = ProfitLossCalculator.daily_series(dataset, JUNE_START, JUNE_END)
        figures = ProfitLossCalculator.period_figures(dataset, JUNE_START, JUNE_END)
        assert sum(d.revenue for d in days) == pytest.approx(figures.revenue)
        assert sum(d.cogs for d in days) == pytest.approx(figures.cogs)
        assert sum(d.expenses for d in days) == pytest.approx(figures.operating_expenses)
        assert sum(d.payroll for d in days) == pytest.approx(figures.payroll)
        assert sum(d.net_profit for d in days) == pytest.approx(figures.net_profit)

    def test_recurring_spread_evenly(self, dataset: ReportDataset) -> None:
        days = ProfitLossCalculator.daily_series(dataset, JUNE_START, JUNE_END)
        # June 1 has no sales or one-off costs: only the spread rent and payroll
        assert days[0].revenue == 0
        assert days[0].expenses == pytest.approx(100)
        assert days[0].payroll == pytest.approx(40)
        assert days[0].margin == 0.0

    def test_inverted_window(self, dataset: ReportDataset) -> None:
        assert ProfitLossCalculator.daily_series(dataset, JUNE_END, JUNE_START) == []
