"""Portfolio query package."""

from lendbook.queries.portfolio import PortfolioQueries

__all__ = ["PortfolioQueries"]
