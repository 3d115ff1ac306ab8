"""
Price repository - database operations for the daily_prices table.
"""
from datetime import date
from typing import List
from watchlist_sync.repositories.base_repository import BaseRepository
from watchlist_sync.models.daily_price import DailyPricePoint


class PriceRepository(BaseRepository):
    """Repository for daily price points"""

    async def upsert(self, point: DailyPricePoint) -> None:
        """
        Insert a price point or replace the existing one for (symbol, trade_date).

        Raises:
            PersistenceError: if the write fails
        """
        query = """
            INSERT INTO daily_prices (
                symbol, trade_date, open, high, low, close, volume, adj_close
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            ON CONFLICT (symbol, trade_date) DO UPDATE
            SET
                open = EXCLUDED.open,
                high = EXCLUDED.high,
                low = EXCLUDED.low,
                close = EXCLUDED.close,
                volume = EXCLUDED.volume,
                adj_close = EXCLUDED.adj_close,
                updated_at = NOW()
        """
        await self.execute(
            query,
            point.symbol.upper(),
            point.trade_date,
            point.open,
            point.high,
            point.low,
            point.close,
            point.volume,
            point.adj_close,
        )

    async def delete_before(self, cutoff: date) -> int:
        """
        Delete every price point dated strictly before cutoff.

        Returns:
            int: Number of rows deleted
        """
        status = await self.execute("DELETE FROM daily_prices WHERE trade_date < $1", cutoff)
        deleted = self.affected_rows(status)
        self.logger.info(f"Deleted {deleted} price points older than {cutoff}")
        return deleted

    async def get_history(self, symbol: str, limit: int = 30) -> List[DailyPricePoint]:
        """
        Get the most recent price points for a symbol, oldest first.
        """
        query = """
            SELECT symbol, trade_date, open, high, low, close, volume, adj_close
            FROM (
                SELECT * FROM daily_prices
                WHERE symbol = $1
                ORDER BY trade_date DESC
                LIMIT $2
            ) recent
            ORDER BY trade_date ASC
        """
        rows = await self.fetch(query, symbol.upper(), limit)
        return [DailyPricePoint(**dict(row)) for row in rows]
