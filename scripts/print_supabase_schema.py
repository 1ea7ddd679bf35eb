# =============================================================================
# scripts/print_supabase_schema.py
# Prints the SQL that creates the Supabase collections
# =============================================================================
"""
Generates CREATE TABLE statements for every synchronized collection, derived
from the document mappers so the schema always matches what gets pushed.

Generate SQL (copy to Supabase SQL Editor):
    python scripts/print_supabase_schema.py

Save it to a file as well:
    python scripts/print_supabase_schema.py --output supabase_schema.sql

Check which collections already exist (uses .salon/config.toml / env):
    python scripts/print_supabase_schema.py --check
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from salon_core.models import (  # noqa: E402
    Appointment,
    Customer,
    CustomerNote,
    Employee,
    Expense,
    Payment,
    Service,
    Transaction,
    WorkingHours,
)
from salon_core.repositories.appointment_repository import appointment_to_document  # noqa: E402
from salon_core.repositories.customer_note_repository import customer_note_to_document  # noqa: E402
from salon_core.repositories.customer_repository import customer_to_document  # noqa: E402
from salon_core.repositories.employee_repository import employee_to_document  # noqa: E402
from salon_core.repositories.expense_repository import expense_to_document  # noqa: E402
from salon_core.repositories.payment_repository import payment_to_document  # noqa: E402
from salon_core.repositories.service_repository import service_to_document  # noqa: E402
from salon_core.repositories.transaction_repository import transaction_to_document  # noqa: E402
from salon_core.repositories.working_hours_repository import working_hours_to_document  # noqa: E402

COLLECTIONS: List[Tuple[str, Callable[[], Dict[str, Any]]]] = [
    ("customers", lambda: customer_to_document(Customer())),
    ("appointments", lambda: appointment_to_document(Appointment())),
    ("services", lambda: service_to_document(Service())),
    ("expenses", lambda: expense_to_document(Expense())),
    ("working_hours", lambda: working_hours_to_document(WorkingHours())),
    ("customer_notes", lambda: customer_note_to_document(CustomerNote())),
    ("transactions", lambda: transaction_to_document(Transaction())),
    ("employees", lambda: employee_to_document(Employee())),
    ("payments", lambda: payment_to_document(Payment())),
]

ACCOUNT_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    "email" TEXT,
    "username" TEXT,
    "createdAt" TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS username_mappings (
    id TEXT PRIMARY KEY,
    "username" TEXT NOT NULL,
    "email" TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_username_mappings_email ON username_mappings("email");
"""


def column_type(name: str, value: Any) -> str:
    """SQL type for a document field."""
    if name in ("createdAt", "updatedAt"):
        return "TIMESTAMP WITH TIME ZONE"
    if isinstance(value, bool):
        return "BOOLEAN"
    if isinstance(value, (int, float)):
        return "DOUBLE PRECISION"
    if isinstance(value, (list, dict)):
        return "JSONB"
    return "TEXT"


def table_sql(collection: str, sample: Dict[str, Any]) -> str:
    sample = dict(sample)
    sample["lastModifiedBy"] = ""
    columns = ["    id TEXT PRIMARY KEY"]
    for name, value in sample.items():
        if name == "id":
            continue
        not_null = " NOT NULL" if name == "businessId" else ""
        columns.append(f'    "{name}" {column_type(name, value)}{not_null}')

    return (
        f"CREATE TABLE IF NOT EXISTS {collection} (\n"
        + ",\n".join(columns)
        + "\n);\n"
        f'CREATE INDEX IF NOT EXISTS idx_{collection}_business ON {collection}("businessId");\n'
    )


def build_sql() -> str:
    parts = [
        "-- ============================================================================",
        "-- SALON SYNC COLLECTIONS",
        "-- One table per synchronized entity; pulls filter on \"businessId\" only",
        "-- ============================================================================",
        "",
    ]
    for collection, sample in COLLECTIONS:
        parts.append(table_sql(collection, sample()))
    parts.append(ACCOUNT_TABLES_SQL)
    return "\n".join(parts)


def print_sql(sql: str) -> None:
    """Print the SQL for manual execution in Supabase SQL Editor."""
    print("=" * 70)
    print(" SQL TO CREATE THE SALON COLLECTIONS")
    print(" Copy this SQL and run it in Supabase SQL Editor")
    print("=" * 70)
    print()
    print(sql)
    print("=" * 70)


def check_tables() -> None:
    """Report which collections exist in the configured project."""
    from salon_core.config import load_config
    from salon_core.data import get_supabase_client

    client = get_supabase_client(load_config())
    if client is None:
        print("ERROR: Missing Supabase credentials.")
        print("Set SUPABASE_URL and SUPABASE_KEY, or fill .salon/config.toml.")
        sys.exit(1)

    names = [collection for collection, _ in COLLECTIONS] + ["users", "username_mappings"]
    for name in names:
        try:
            client.table(name).select("id").limit(1).execute()
            print(f"  OK       {name}")
        except Exception as e:
            print(f"  MISSING  {name}: {e}")


def main():
    parser = argparse.ArgumentParser(description="Print the Supabase schema for the salon collections")
    parser.add_argument("--output", type=Path, help="Also write the SQL to this file")
    parser.add_argument("--check", action="store_true", help="Check which tables exist")

    args = parser.parse_args()

    if args.check:
        check_tables()
        return

    sql = build_sql()
    print_sql(sql)

    if args.output:
        args.output.write_text(sql, encoding="utf-8")
        print(f"\nSQL also saved to: {args.output}")


if __name__ == "__main__":
    main()
