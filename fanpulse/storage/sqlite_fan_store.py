"""SQLite data access for fans, engagement events, merchandise, and purchases.

Opens a short-lived connection per unit of work so a single store instance
can be shared by concurrent request handlers without a process-wide handle.
Rows are returned as Pydantic models; aggregation and scoring live in
``fanpulse.processing``.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import date

from fanpulse.storage.models.fan import (
    EngagementEvent,
    Fan,
    MerchandiseItem,
    Promotion,
    Purchase,
)
from fanpulse.storage.models.results import PurchaseRecord, RecentEngagement

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS fans (
    fan_id TEXT PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    favorite_team TEXT,
    favorite_players TEXT,
    join_date TEXT NOT NULL,
    city TEXT,
    state TEXT
);

CREATE TABLE IF NOT EXISTS engagement_events (
    event_id TEXT PRIMARY KEY,
    fan_id TEXT NOT NULL REFERENCES fans(fan_id),
    event_type TEXT NOT NULL,
    event_date TEXT NOT NULL,
    details TEXT
);

CREATE TABLE IF NOT EXISTS merchandise (
    product_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    team TEXT,
    player TEXT,
    price REAL NOT NULL CHECK (price >= 0),
    image_url TEXT,
    in_stock INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS purchases (
    purchase_id TEXT PRIMARY KEY,
    fan_id TEXT NOT NULL REFERENCES fans(fan_id),
    product_id TEXT NOT NULL REFERENCES merchandise(product_id),
    purchase_date TEXT NOT NULL,
    quantity INTEGER NOT NULL DEFAULT 1 CHECK (quantity > 0),
    total_price REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS promotions (
    promotion_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    discount_percent REAL,
    target_segment TEXT,
    product_category TEXT,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    created_date TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_events_fan_date ON engagement_events (fan_id, event_date);
CREATE INDEX IF NOT EXISTS ix_purchases_fan ON purchases (fan_id);
"""

_FAN_COLUMNS = (
    "fan_id, first_name, last_name, email, favorite_team, favorite_players, "
    "join_date, city, state"
)
_MERCH_COLUMNS = "product_id, name, category, team, player, price, in_stock"


def _like_pattern(fragment: str) -> str:
    """Wrap *fragment* for a case-insensitive ``LIKE ... ESCAPE '\\'`` match."""
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.lower()}%"


def _merch_from_row(row: sqlite3.Row) -> MerchandiseItem:
    return MerchandiseItem(
        product_id=row["product_id"],
        name=row["name"],
        category=row["category"],
        team=row["team"],
        player=row["player"],
        price=row["price"],
        in_stock=bool(row["in_stock"]),
    )


class SQLiteFanStore:
    """Read/write layer over the FanPulse SQLite database."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # ── schema ────────────────────────────────────────────────────────

    def ensure_schema(self) -> None:
        """Create tables and secondary indexes if they do not exist."""
        with self._connect() as conn:
            conn.executescript(SCHEMA)
        logger.info("SQLite schema ensured at %s", self._db_path)

    # ── fans ──────────────────────────────────────────────────────────

    def find_fan(self, identifier: str) -> Fan | None:
        """Resolve a fan by ID or by email address."""
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_FAN_COLUMNS} FROM fans WHERE fan_id = ? OR email = ?",  # nosec B608
                (identifier, identifier),
            ).fetchone()
        return Fan(**dict(row)) if row is not None else None

    def get_fan(self, fan_id: str) -> Fan | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_FAN_COLUMNS} FROM fans WHERE fan_id = ?",  # nosec B608
                (fan_id,),
            ).fetchone()
        return Fan(**dict(row)) if row is not None else None

    def list_fans(self, team: str | None = None) -> list[Fan]:
        """All fans ordered by ID, optionally filtered by favorite-team substring."""
        sql = f"SELECT {_FAN_COLUMNS} FROM fans"  # nosec B608
        params: tuple[str, ...] = ()
        if team is not None:
            sql += " WHERE lower(favorite_team) LIKE ? ESCAPE '\\'"
            params = (_like_pattern(team),)
        sql += " ORDER BY fan_id"
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [Fan(**dict(row)) for row in rows]

    def count_fans(self) -> int:
        with self._connect() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM fans").fetchone()[0])

    def count_fans_with_event_total(
        self, min_events: int | None = None, below_events: int | None = None
    ) -> int:
        """Count fans whose all-time event total is in ``[min_events, below_events)``."""
        conditions: list[str] = []
        params: list[int] = []
        if min_events is not None:
            conditions.append("total >= ?")
            params.append(min_events)
        if below_events is not None:
            conditions.append("total < ?")
            params.append(below_events)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        sql = (
            "SELECT COUNT(*) FROM ("
            "  SELECT f.fan_id, COUNT(e.event_id) AS total"
            "  FROM fans f LEFT JOIN engagement_events e ON e.fan_id = f.fan_id"
            "  GROUP BY f.fan_id"
            f") {where}"  # nosec B608
        )
        with self._connect() as conn:
            return int(conn.execute(sql, params).fetchone()[0])

    def count_fans_without_purchases(self) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM fans f WHERE NOT EXISTS ("
                "  SELECT 1 FROM purchases p WHERE p.fan_id = f.fan_id)"
            ).fetchone()
        return int(row[0])

    # ── engagement events ─────────────────────────────────────────────

    def list_events(
        self, fan_id: str | None = None, since: date | None = None
    ) -> list[EngagementEvent]:
        """Events ordered by fan then date, optionally scoped to one fan and a cutoff."""
        conditions: list[str] = []
        params: list[str] = []
        if fan_id is not None:
            conditions.append("fan_id = ?")
            params.append(fan_id)
        if since is not None:
            conditions.append("event_date >= ?")
            params.append(since.isoformat())
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT event_id, fan_id, event_type, event_date, details "
                f"FROM engagement_events {where} ORDER BY fan_id, event_date, event_id",  # nosec B608
                params,
            ).fetchall()
        return [EngagementEvent(**dict(row)) for row in rows]

    def recent_engagements(self, fan_id: str, limit: int = 10) -> list[RecentEngagement]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT event_type, event_date, details FROM engagement_events "
                "WHERE fan_id = ? ORDER BY event_date DESC, event_id DESC LIMIT ?",
                (fan_id, limit),
            ).fetchall()
        return [
            RecentEngagement(type=row["event_type"], date=row["event_date"], details=row["details"])
            for row in rows
        ]

    def insert_event(self, event: EngagementEvent) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO engagement_events (event_id, fan_id, event_type, event_date, details) "
                "VALUES (?, ?, ?, ?, ?)",
                (event.event_id, event.fan_id, event.event_type, event.event_date, event.details),
            )
        logger.debug("Inserted engagement event %s for %s", event.event_id, event.fan_id)

    # ── purchases ─────────────────────────────────────────────────────

    def list_purchases(self, fan_id: str | None = None) -> list[Purchase]:
        sql = (
            "SELECT purchase_id, fan_id, product_id, purchase_date, quantity, total_price "
            "FROM purchases"
        )
        params: tuple[str, ...] = ()
        if fan_id is not None:
            sql += " WHERE fan_id = ?"
            params = (fan_id,)
        sql += " ORDER BY fan_id, purchase_date, purchase_id"
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [Purchase(**dict(row)) for row in rows]

    def purchase_history(self, fan_id: str) -> list[PurchaseRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT p.purchase_date, m.name, m.category, p.quantity, p.total_price "
                "FROM purchases p JOIN merchandise m ON p.product_id = m.product_id "
                "WHERE p.fan_id = ? ORDER BY p.purchase_date DESC, p.purchase_id DESC",
                (fan_id,),
            ).fetchall()
        return [
            PurchaseRecord(
                date=row["purchase_date"],
                product=row["name"],
                category=row["category"],
                quantity=row["quantity"],
                total_price=row["total_price"],
            )
            for row in rows
        ]

    def purchased_product_ids(self, fan_id: str) -> set[str]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT DISTINCT product_id FROM purchases WHERE fan_id = ?", (fan_id,)
            ).fetchall()
        return {row["product_id"] for row in rows}

    # ── merchandise ───────────────────────────────────────────────────

    def search_merchandise(
        self,
        team: str | None = None,
        category: str | None = None,
        player: str | None = None,
        max_price: float | None = None,
        in_stock_only: bool = True,
    ) -> list[MerchandiseItem]:
        """Substring-filtered catalog, sorted by category, price, then product ID."""
        conditions: list[str] = []
        params: list[object] = []
        for column, value in (("team", team), ("category", category), ("player", player)):
            if value is not None:
                conditions.append(f"lower(coalesce({column}, '')) LIKE ? ESCAPE '\\'")
                params.append(_like_pattern(value))
        if max_price is not None:
            conditions.append("price <= ?")
            params.append(max_price)
        if in_stock_only:
            conditions.append("in_stock = 1")
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_MERCH_COLUMNS} FROM merchandise {where} "  # nosec B608
                "ORDER BY category, price, product_id",
                params,
            ).fetchall()
        return [_merch_from_row(row) for row in rows]

    def list_merchandise(self, in_stock_only: bool = True) -> list[MerchandiseItem]:
        return self.search_merchandise(in_stock_only=in_stock_only)

    # ── promotions ────────────────────────────────────────────────────

    def insert_promotion(self, promotion: Promotion) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO promotions (promotion_id, name, description, discount_percent, "
                "target_segment, product_category, start_date, end_date, created_date) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    promotion.promotion_id,
                    promotion.name,
                    promotion.description,
                    promotion.discount_percent,
                    promotion.target_segment,
                    promotion.product_category,
                    promotion.start_date.isoformat(),
                    promotion.end_date.isoformat(),
                    promotion.created_date.isoformat(),
                ),
            )
        logger.info("Promotion %s stored", promotion.promotion_id)

    # ── bulk loading ──────────────────────────────────────────────────

    def is_empty(self) -> bool:
        return self.count_fans() == 0

    def load(
        self,
        fans: Iterable[Fan] = (),
        events: Iterable[EngagementEvent] = (),
        merchandise: Iterable[MerchandiseItem] = (),
        purchases: Iterable[Purchase] = (),
    ) -> None:
        """Insert rows in dependency order inside one transaction."""
        with self._connect() as conn:
            conn.executemany(
                f"INSERT INTO fans ({_FAN_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",  # nosec B608
                [
                    (
                        f.fan_id, f.first_name, f.last_name, f.email, f.favorite_team,
                        f.favorite_players, f.join_date, f.city, f.state,
                    )
                    for f in fans
                ],
            )
            conn.executemany(
                "INSERT INTO engagement_events (event_id, fan_id, event_type, event_date, details) "
                "VALUES (?, ?, ?, ?, ?)",
                [(e.event_id, e.fan_id, e.event_type, e.event_date, e.details) for e in events],
            )
            conn.executemany(
                f"INSERT INTO merchandise ({_MERCH_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",  # nosec B608
                [
                    (m.product_id, m.name, m.category, m.team, m.player, m.price, int(m.in_stock))
                    for m in merchandise
                ],
            )
            conn.executemany(
                "INSERT INTO purchases (purchase_id, fan_id, product_id, purchase_date, "
                "quantity, total_price) VALUES (?, ?, ?, ?, ?, ?)",
                [
                    (p.purchase_id, p.fan_id, p.product_id, p.purchase_date, p.quantity, p.total_price)
                    for p in purchases
                ],
            )
