import argparse
from decimal import Decimal

from sqlalchemy import delete, select

from orderledger.core.logging import setup_logging
from orderledger.database import SessionLocal, init_db, transaction
from orderledger.models import (
    Customer,
    Order,
    OrderItem,
    OrderNumberSequence,
    Product,
    PurchaseRecord,
)
from orderledger.services.stock_ledger import increment


def parse_args():
    parser = argparse.ArgumentParser(description="Seed demo customers and products.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing orders, purchases, customers and products before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    init_db()

    db = SessionLocal()
    try:
        if args.reset:
            with transaction(db):
                db.execute(delete(PurchaseRecord))
                db.execute(delete(OrderItem))
                db.execute(delete(Order))
                db.execute(delete(OrderNumberSequence))
                db.execute(delete(Product))
                db.execute(delete(Customer))

        has_product = db.execute(select(Product.id).limit(1)).first()
        if has_product:
            print("Seed skipped: products already exist.")
            return

        with transaction(db):
            db.add_all(
                [
                    Customer(name="Li Wei", phone="13800000001"),
                    Customer(name="Zhang Min", phone="13800000002"),
                ]
            )
            products = [
                Product(sku="TEA-OOLONG-250", price=Decimal("48.00")),
                Product(sku="TEA-PUER-357", price=Decimal("168.00")),
                Product(sku="CUP-CELADON", price=Decimal("35.50")),
            ]
            db.add_all(products)
            db.flush()

            # Opening balances are booked as stock-in so total_in matches.
            for product, opening in zip(products, (120, 40, 60)):
                increment(db, product.id, opening)

        print("Seed data created.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
