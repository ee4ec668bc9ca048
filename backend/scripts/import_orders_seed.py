"""Load CSV seed orders (and the customers they belong to) into the database."""

from __future__ import annotations

import csv
import sys
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from sqlalchemy import select

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from freightdesk.database import Base, SessionLocal, engine  # noqa: E402
from freightdesk import models  # noqa: E402
from freightdesk.statuses import OrderStatus  # noqa: E402


@dataclass
class ImportStats:
    created: int = 0
    skipped: int = 0
    customers: int = 0


def load_existing_tracking_numbers(session) -> set[str]:
    rows = session.execute(select(models.Order.tracking_number))
    return {row[0] for row in rows if row[0]}


def get_or_create_customer(session, code: str, name: str, stats: ImportStats) -> models.Customer:
    customer = session.scalars(select(models.Customer).where(models.Customer.code == code)).first()
    if customer is None:
        customer = models.Customer(code=code, name=name, push_tokens=[])
        session.add(customer)
        session.flush()
        stats.customers += 1
    return customer


def parse_row(row: dict[str, str], customer_id: int | None = None) -> models.Order:
    cny_price = row.get("cny_price")
    return models.Order(
        tracking_number=row["tracking_number"],
        name=row["name"],
        usd_price=Decimal(row["usd_price"]).quantize(Decimal("0.01")),
        cny_price=Decimal(cny_price).quantize(Decimal("0.01")) if cny_price else None,
        country=row.get("country") or "CHINA",
        notes=row.get("notes") or None,
        customer_id=customer_id,
        status=OrderStatus.PURCHASED,
    )


def import_csv(csv_path: Path) -> ImportStats:
    stats = ImportStats()
    with SessionLocal() as session:
        existing = load_existing_tracking_numbers(session)
        with csv_path.open(newline="", encoding="utf-8") as fh:
            reader = csv.DictReader(fh)
            for row in reader:
                if row["tracking_number"] in existing:
                    stats.skipped += 1
                    continue
                customer_id = None
                if row.get("customer_code"):
                    customer = get_or_create_customer(
                        session, row["customer_code"], row.get("customer_name") or row["customer_code"], stats
                    )
                    customer_id = customer.id
                session.add(parse_row(row, customer_id))
                existing.add(row["tracking_number"])
                stats.created += 1
        session.commit()
    return stats


def main() -> None:
    csv_path = ROOT.parent / "data" / "orders_seed.csv"
    if not csv_path.exists():
        raise SystemExit(f"CSV file not found: {csv_path}")

    Base.metadata.create_all(bind=engine)
    stats = import_csv(csv_path)
    print(
        f"Created {stats.created} orders ({stats.customers} new customers), "
        f"skipped {stats.skipped} duplicates."
    )


if __name__ == "__main__":
    main()
