"""SQLite implementation of the on-device store."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from calorie_calculator.domain.models import Food, MealRecord, UserSettings
from calorie_calculator.domain.timestamps import format_timestamp, parse_timestamp
from calorie_calculator.services.diary import LocalStore, LocalStoreError

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS foods (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        calories_per_100g REAL NOT NULL,
        protein REAL NOT NULL,
        carbs REAL NOT NULL,
        fat REAL NOT NULL,
        category TEXT NOT NULL,
        image_url TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS meal_records (
        id TEXT PRIMARY KEY,
        food_id TEXT NOT NULL,
        food_name TEXT NOT NULL,
        amount REAL NOT NULL,
        calories REAL NOT NULL,
        protein REAL NOT NULL,
        carbs REAL NOT NULL,
        fat REAL NOT NULL,
        timestamp TEXT NOT NULL,
        meal_type TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_meal_records_timestamp "
    "ON meal_records(timestamp);",
    """
    CREATE TABLE IF NOT EXISTS user_settings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        daily_calorie_goal INTEGER NOT NULL DEFAULT 2000,
        weight REAL,
        height REAL,
        age INTEGER,
        activity_level TEXT DEFAULT 'moderate',
        gender TEXT DEFAULT 'male',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
)

_LATEST_SETTINGS_ID = (
    "SELECT id FROM user_settings ORDER BY updated_at DESC, id DESC LIMIT 1"
)


@dataclass
class SqliteLocalStore(LocalStore):
    """Single-connection SQLite store for foods, meals and settings."""

    connection: sqlite3.Connection

    @classmethod
    def open(cls, db_path: str | Path) -> "SqliteLocalStore":
        """Open (or create) the database file."""
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            connection = sqlite3.connect(str(db_path), check_same_thread=False)
        except sqlite3.Error as exc:
            raise LocalStoreError("Failed to open the local database") from exc
        connection.row_factory = sqlite3.Row
        return cls(connection)

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            with self.connection:
                yield self.connection
        except sqlite3.Error as exc:
            raise LocalStoreError("Local database operation failed") from exc

    def create_schema(self) -> None:
        """Create tables if they do not exist."""
        with self._transaction() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    def count_foods(self) -> int:
        """Return the number of stored foods."""
        with self._transaction() as conn:
            row = conn.execute("SELECT COUNT(*) AS count FROM foods").fetchone()
        return int(row["count"])

    def insert_food(self, food: Food) -> None:
        """Insert a food row."""
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO foods (id, name, calories_per_100g, protein, carbs, fat, "
                "category, image_url) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    food.id,
                    food.name,
                    food.calories_per_100g,
                    food.protein,
                    food.carbs,
                    food.fat,
                    food.category,
                    food.image_url,
                ),
            )

    def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query."""
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM foods WHERE name LIKE ? ORDER BY name ASC",
                (f"%{query}%",),
            ).fetchall()
        return [_parse_food(row) for row in rows]

    def get_food(self, food_id: str) -> Food | None:
        """Return a food by id."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM foods WHERE id = ?", (food_id,)
            ).fetchone()
        return _parse_food(row) if row else None

    def delete_food_with_meal_records(self, food_id: str) -> int:
        """Delete a food and its meal records in one transaction."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM meal_records WHERE food_id = ?", (food_id,)
            )
            conn.execute("DELETE FROM foods WHERE id = ?", (food_id,))
        return cursor.rowcount

    def list_categories(self) -> list[str]:
        """Return distinct categories."""
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT DISTINCT category FROM foods ORDER BY category ASC"
            ).fetchall()
        return [row["category"] for row in rows]

    def insert_meal_record(self, record: MealRecord) -> None:
        """Insert a meal record row."""
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO meal_records (id, food_id, food_name, amount, calories, "
                "protein, carbs, fat, timestamp, meal_type) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.food_id,
                    record.food_name,
                    record.amount,
                    record.calories,
                    record.protein,
                    record.carbs,
                    record.fat,
                    format_timestamp(record.timestamp),
                    record.meal_type,
                ),
            )

    def list_meal_records(
        self, start: datetime, end: datetime | None = None
    ) -> list[MealRecord]:
        """Return meal records in [start, end), oldest first."""
        sql = "SELECT * FROM meal_records WHERE timestamp >= ?"
        params: list[str] = [format_timestamp(start)]
        if end is not None:
            sql += " AND timestamp < ?"
            params.append(format_timestamp(end))
        sql += " ORDER BY timestamp ASC"
        with self._transaction() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_parse_meal(row) for row in rows]

    def delete_meal_record(self, meal_id: str) -> None:
        """Delete a meal record by id."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM meal_records WHERE id = ?", (meal_id,))

    def clear_meal_records(self) -> None:
        """Delete all meal records."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM meal_records")

    def get_latest_settings(self) -> UserSettings | None:
        """Return the most recently updated settings row."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM user_settings ORDER BY updated_at DESC, id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        defaults = UserSettings()
        return UserSettings(
            daily_calorie_goal=int(row["daily_calorie_goal"]),
            weight=_or_default(row["weight"], defaults.weight),
            height=_or_default(row["height"], defaults.height),
            age=int(_or_default(row["age"], defaults.age)),
            gender=row["gender"] or defaults.gender,
            activity_level=row["activity_level"] or defaults.activity_level,
        )

    def insert_settings(self, settings: UserSettings) -> None:
        """Insert a settings row."""
        now = format_timestamp(datetime.now(tz=UTC))
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO user_settings (daily_calorie_goal, weight, height, age, "
                "activity_level, gender, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    settings.daily_calorie_goal,
                    settings.weight,
                    settings.height,
                    settings.age,
                    settings.activity_level,
                    settings.gender,
                    now,
                    now,
                ),
            )

    def update_latest_settings(self, fields: dict[str, object]) -> None:
        """Update columns on the latest settings row."""
        if not fields:
            return
        columns = sorted(fields)
        assignments = ", ".join(f"{column} = ?" for column in columns)
        values = [fields[column] for column in columns]
        values.append(format_timestamp(datetime.now(tz=UTC)))
        with self._transaction() as conn:
            conn.execute(
                f"UPDATE user_settings SET {assignments}, updated_at = ? "  # noqa: S608
                f"WHERE id = ({_LATEST_SETTINGS_ID})",
                values,
            )

    def delete_settings(self) -> None:
        """Delete every settings row."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM user_settings")


def _or_default(value: object, default: float) -> float:
    return default if value is None else float(value)


def _parse_food(row: sqlite3.Row) -> Food:
    return Food(
        id=row["id"],
        name=row["name"],
        calories_per_100g=float(row["calories_per_100g"]),
        protein=float(row["protein"]),
        carbs=float(row["carbs"]),
        fat=float(row["fat"]),
        category=row["category"],
        image_url=row["image_url"],
    )


def _parse_meal(row: sqlite3.Row) -> MealRecord:
    return MealRecord(
        id=row["id"],
        food_id=row["food_id"],
        food_name=row["food_name"],
        amount=float(row["amount"]),
        calories=float(row["calories"]),
        protein=float(row["protein"]),
        carbs=float(row["carbs"]),
        fat=float(row["fat"]),
        timestamp=parse_timestamp(row["timestamp"]),
        meal_type=row["meal_type"],
    )
