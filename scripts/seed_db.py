#!/usr/bin/env python3
"""Seed the supplier database with sample suppliers, evaluations and non-conformities."""

import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.database import build_engine, build_sessionmaker, init_db
from api.schemas import EvaluationCreate, NonConformityCreate, Ratings, SupplierCreate
from store.app_store import build_store

SUPPLIERS = [
    ("Alpha Components", "Alpha Componentes Ltda", "12.345.678/0001-90", "electronics", "5511987650001"),
    ("Beta Packaging", "Beta Embalagens SA", "23.456.789/0001-01", "packaging", "5511987650002"),
    ("Gamma Logistics", "Gamma Transportes Ltda", "34.567.890/0001-12", "logistics", "5511987650003"),
    ("Delta Chemicals", "Delta Quimica SA", "45.678.901/0001-23", "raw_materials", "5511987650004"),
]

# quality, price, delivery, communication
SCORES = [(5, 4, 5, 4), (3, 3, 2, 3), (4, 5, 3, 4), (2, 2, 1, 3)]


async def seed() -> None:
    engine = build_engine()
    await init_db(engine)
    store = build_store(build_sessionmaker(engine))
    try:
        await store.load_initial_data()
        if store.suppliers:
            print(f"Database already has {len(store.suppliers)} suppliers. Skipping.")
            return

        suppliers = await store.add_suppliers([
            SupplierCreate(
                name=name,
                legal_name=legal_name,
                document_number=doc,
                category=category,
                email=f"contact@{name.split()[0].lower()}.example.com",
                phone=phone,
            )
            for name, legal_name, doc, category, phone in SUPPLIERS
        ])

        base = datetime.now(timezone.utc)
        for i, (supplier, (quality, price, delivery, communication)) in enumerate(zip(suppliers, SCORES)):
            await store.add_evaluation(
                EvaluationCreate(
                    supplier_id=supplier.id,
                    evaluator="procurement@example.com",
                    date=base - timedelta(days=i * 3),
                    ratings=Ratings(quality=quality, price=price, delivery=delivery, communication=communication),
                    comments="Quarterly review",
                )
            )

        await store.add_non_conformity(
            NonConformityCreate(
                supplier_id=suppliers[1].id,
                type="delivery",
                severity="high",
                description="Shipment arrived five days late",
                reported_date=base - timedelta(days=2),
            )
        )
        await store.add_non_conformity(
            NonConformityCreate(
                supplier_id=suppliers[3].id,
                type="quality",
                severity="critical",
                description="Batch failed purity inspection",
                reported_date=base - timedelta(days=10),
            )
        )
        print(
            f"Seeded: {len(suppliers)} suppliers, {len(store.evaluations)} evaluations, "
            f"{len(store.non_conformities)} non-conformities."
        )
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
