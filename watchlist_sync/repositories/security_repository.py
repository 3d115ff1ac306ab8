"""
Security repository - database operations for the securities table.
"""
from typing import List, Optional
from watchlist_sync.repositories.base_repository import BaseRepository
from watchlist_sync.models.security import Security

SECURITY_COLUMNS = """
    symbol, name, sector, industry, market_cap, currency, exchange,
    created_at, updated_at
"""


class SecurityRepository(BaseRepository):
    """Repository for security-related database operations"""

    async def upsert(self, security: Security) -> Security:
        """
        Insert a security or replace its descriptive fields.

        Args:
            security: Security keyed by symbol

        Returns:
            Security as stored
        """
        query = f"""
            INSERT INTO securities (
                symbol, name, sector, industry, market_cap, currency, exchange
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            ON CONFLICT (symbol) DO UPDATE
            SET
                name = EXCLUDED.name,
                sector = EXCLUDED.sector,
                industry = EXCLUDED.industry,
                market_cap = EXCLUDED.market_cap,
                currency = EXCLUDED.currency,
                exchange = EXCLUDED.exchange,
                updated_at = NOW()
            RETURNING {SECURITY_COLUMNS}
        """
        row = await self.fetchrow(
            query,
            security.symbol.upper(),
            security.name,
            security.sector,
            security.industry,
            security.market_cap,
            security.currency,
            security.exchange,
        )
        return Security(**dict(row))

    async def get_by_symbol(self, symbol: str) -> Optional[Security]:
        """Get a security by symbol, or None."""
        query = f"SELECT {SECURITY_COLUMNS} FROM securities WHERE symbol = $1"
        row = await self.fetchrow(query, symbol.upper())
        if row:
            return Security(**dict(row))
        return None

    async def list_symbols(self) -> List[str]:
        """List every stored symbol, alphabetically."""
        rows = await self.fetch("SELECT symbol FROM securities ORDER BY symbol")
        return [row["symbol"] for row in rows]

    async def delete(self, symbol: str) -> bool:
        """
        Delete a security; its price rows go with it (ON DELETE CASCADE).

        Returns:
            True if a row was deleted
        """
        status = await self.execute("DELETE FROM securities WHERE symbol = $1", symbol.upper())
        deleted = self.affected_rows(status) > 0
        if deleted:
            self.logger.info("Deleted security %s", symbol.upper())
        return deleted
