"""Achievement catalog and unlock rules."""

from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .models import Achievement, Portfolio, Trade, TradeSide

AchievementRule = Callable[[Portfolio, Optional[Trade]], bool]

ACHIEVEMENT_CATALOG: Sequence[Achievement] = (
    Achievement(
        id="first_trade",
        name="First Trade",
        description="Execute your first trade.",
        icon="Award",
    ),
    Achievement(
        id="profit_maker",
        name="Profit Maker",
        description="Close a position for a profit.",
        icon="TrendingUp",
    ),
    Achievement(
        id="paper_hands",
        name="Paper Hands",
        description="Close a position for a loss.",
        icon="TrendingDown",
    ),
    Achievement(
        id="diversified",
        name="Diversified",
        description="Hold positions in 5 different stocks at once.",
        icon="Gem",
    ),
    Achievement(
        id="baller",
        name="Baller",
        description="Grow your portfolio value to $110,000.",
        icon="Rocket",
    ),
)

DIVERSIFIED_POSITION_COUNT = 5


def average_buy_price(trades: Iterable[Trade], symbol: str) -> Optional[float]:
    """Quantity-weighted mean price of every BUY of ``symbol``, held or not."""
    total_cost = 0.0
    total_quantity = 0
    for trade in trades:
        if trade.symbol == symbol and trade.side == TradeSide.BUY:
            total_cost += trade.price * trade.quantity
            total_quantity += trade.quantity

    if total_quantity == 0:
        return None
    return total_cost / total_quantity


def _sell_compared_to_buys(
    portfolio: Portfolio, last_trade: Optional[Trade]
) -> Optional[float]:
    """Sale price minus average buy price, or None when the rule does not apply."""
    if last_trade is None or last_trade.side != TradeSide.SELL:
        return None

    avg_price = average_buy_price(portfolio.trade_history, last_trade.symbol)
    if avg_price is None:
        return None
    return last_trade.price - avg_price


def has_traded(portfolio: Portfolio, last_trade: Optional[Trade] = None) -> bool:
    return len(portfolio.trade_history) > 0


def sold_for_profit(portfolio: Portfolio, last_trade: Optional[Trade] = None) -> bool:
    difference = _sell_compared_to_buys(portfolio, last_trade)
    return difference is not None and difference > 0


def sold_for_loss(portfolio: Portfolio, last_trade: Optional[Trade] = None) -> bool:
    difference = _sell_compared_to_buys(portfolio, last_trade)
    return difference is not None and difference < 0


def is_diversified(portfolio: Portfolio, last_trade: Optional[Trade] = None) -> bool:
    return len(portfolio.positions) >= DIVERSIFIED_POSITION_COUNT


def reached_value(threshold: float) -> AchievementRule:
    """Rule that holds once cash plus holdings at cost reaches ``threshold``."""

    def rule(portfolio: Portfolio, last_trade: Optional[Trade] = None) -> bool:
        return portfolio.cost_basis_value() >= threshold

    return rule


class AchievementEngine:
    """Evaluates the catalog against a portfolio. Stateless and side-effect free."""

    def __init__(
        self,
        catalog: Sequence[Achievement] = ACHIEVEMENT_CATALOG,
        baller_threshold: float = 110000.0,
        rules: Optional[Dict[str, AchievementRule]] = None,
    ):
        self.catalog = tuple(catalog)
        self.rules: Dict[str, AchievementRule] = {
            "first_trade": has_traded,
            "profit_maker": sold_for_profit,
            "paper_hands": sold_for_loss,
            "diversified": is_diversified,
            "baller": reached_value(baller_threshold),
        }
        if rules:
            self.rules.update(rules)

    def evaluate(
        self, portfolio: Portfolio, last_trade: Optional[Trade] = None
    ) -> List[str]:
        """
        Get achievement ids that are newly satisfied.

        Ids already in ``portfolio.achievements`` are skipped, so the result
        never overlaps what is unlocked. Ids come back in catalog order.

        Args:
            portfolio: State to evaluate
            last_trade: Trade that produced this state, if any

        Returns:
            Catalog-ordered list of newly unlocked achievement ids
        """
        unlocked = set(portfolio.achievements)
        newly_unlocked = []

        for achievement in self.catalog:
            if achievement.id in unlocked:
                continue
            rule = self.rules.get(achievement.id)
            if rule is not None and rule(portfolio, last_trade):
                newly_unlocked.append(achievement.id)

        return newly_unlocked

    def get(self, achievement_id: str) -> Optional[Achievement]:
        for achievement in self.catalog:
            if achievement.id == achievement_id:
                return achievement
        return None
