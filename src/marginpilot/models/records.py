"""
Historical record models — sales, expenses, waste, payroll, meal prep.

These are the immutable inputs the engine consumes. Connectors produce them,
analyzers read them; nothing in MarginPilot ever mutates a record.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_ITEM = "Unknown"
UNCATEGORIZED = "Uncategorized"


class SaleStatus(str, Enum):
    """Lifecycle status of a sale. Only completed sales are analysed."""

    COMPLETED = "COMPLETED"
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"


class ExpenseCadence(str, Enum):
    """How often a recurring expense is charged."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"


class PayrollStatus(str, Enum):
    PAID = "PAID"
    PENDING = "PENDING"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class SaleItem(_Record):
    """One line of a sale. Price and cost are captured at sale time."""

    id: str | None = None
    menu_item_id: str
    quantity: int = Field(default=1, ge=1)
    price: float = Field(ge=0.0, description="Unit price at time of sale")
    cost: float | None = Field(default=None, description="Unit cost at time of sale (None = uncosted)")

    @property
    def unit_cost(self) -> float:
        return self.cost if self.cost is not None else 0.0

    @property
    def is_costed(self) -> bool:
        return self.cost is not None and self.cost >= 0

    @property
    def revenue(self) -> float:
        return self.price * self.quantity

    @property
    def total_cost(self) -> float:
        return self.unit_cost * self.quantity

    @property
    def profit(self) -> float:
        return (self.price - self.unit_cost) * self.quantity


class Sale(_Record):
    """A completed (or pending/cancelled) order with its line items."""

    id: str
    timestamp: datetime
    total: float = 0.0
    status: SaleStatus = SaleStatus.COMPLETED
    table_id: str | None = None
    waiter_id: str | None = None
    items: list[SaleItem] = Field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.status == SaleStatus.COMPLETED

    @property
    def revenue(self) -> float:
        """Line-level revenue; ``total`` is informational only."""
        return sum(item.revenue for item in self.items)

    @property
    def cost(self) -> float:
        return sum(item.total_cost for item in self.items)

    @property
    def profit(self) -> float:
        return sum(item.profit for item in self.items)


class Expense(_Record):
    """A recurring operating cost with a cadence and an active date window."""

    id: str | None = None
    name: str = ""
    category: str = "General"
    amount: float
    cadence: ExpenseCadence
    start_date: date
    end_date: date | None = None


class ExpenseTransaction(_Record):
    """A one-off, already-dated operating cost."""

    id: str | None = None
    date: date
    amount: float
    category: str = "OTHER"
    notes: str | None = None


class WasteRecord(_Record):
    id: str | None = None
    date: date
    cost: float
    ingredient_id: str | None = None
    reason: str = ""


class Payroll(_Record):
    """An already-computed payment to an employee for a pay period."""

    id: str | None = None
    employee_id: str | None = None
    period: date
    paid_date: date | None = None
    total_paid: float
    status: PayrollStatus = PayrollStatus.PAID


class IngredientUsage(_Record):
    """Ingredient consumed during meal prep, valued at current unit cost."""

    ingredient_id: str
    quantity_used: float
    cost_per_unit: float

    @property
    def cost(self) -> float:
        return self.quantity_used * self.cost_per_unit


class MealPrepSession(_Record):
    id: str | None = None
    prep_date: date
    usages: list[IngredientUsage] = Field(default_factory=list)

    @property
    def total_cost(self) -> float:
        return sum(u.cost for u in self.usages)


class Category(_Record):
    id: str
    name: str


class MenuItem(_Record):
    id: str
    name: str
    category_id: str | None = None


class MenuCatalog(BaseModel):
    """Dimension lookups used only for labelling output."""

    menu_items: dict[str, MenuItem] = Field(default_factory=dict)
    categories: dict[str, Category] = Field(default_factory=dict)

    @classmethod
    def from_lists(
        cls,
        menu_items: list[MenuItem] | None = None,
        categories: list[Category] | None = None,
    ) -> MenuCatalog:
        return cls(
            menu_items={m.id: m for m in menu_items or []},
            categories={c.id: c for c in categories or []},
        )

    def item_name(self, menu_item_id: str) -> str:
        item = self.menu_items.get(menu_item_id)
        return item.name if item else UNKNOWN_ITEM

    def category_name(self, menu_item_id: str) -> str:
        item = self.menu_items.get(menu_item_id)
        if item is None or item.category_id is None:
            return UNCATEGORIZED
        category = self.categories.get(item.category_id)
        return category.name if category else UNCATEGORIZED


class ReportDataset(BaseModel):
    """Everything a report needs for one tenant and window.

    This is what connectors produce and the engine consumes.
    """

    sales: list[Sale] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    expense_transactions: list[ExpenseTransaction] = Field(default_factory=list)
    waste_records: list[WasteRecord] = Field(default_factory=list)
    payrolls: list[Payroll] = Field(default_factory=list)
    meal_prep_sessions: list[MealPrepSession] = Field(default_factory=list)
    catalog: MenuCatalog = Field(default_factory=MenuCatalog)
    source: str = "unknown"

    @property
    def completed_sales(self) -> list[Sale]:
        return [s for s in self.sales if s.is_completed]
