# marketplace/data/seed.py
from decimal import Decimal

from marketplace.data.database import Base, SessionLocal, engine
from marketplace.data.models import UserModel, ProductModel
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_USER = {
    "id": 1,
    "name": "Test Customer",
    "wallet_balance": Decimal("12500.00"),
    "rewards_balance": Decimal("850.00"),
    "employer_id": "emp-001",
    "employer_name": "Acme Health Co.",
}

DEMO_PRODUCTS = [
    {"id": 1, "name": "Digital BP Monitor", "category": "devices", "price": Decimal("1999.00"),
     "stock_quantity": 40, "wallet_eligible": True, "rewards_eligible": True, "benefit_program_id": "flex-devices"},
    {"id": 2, "name": "Vitamin D3 60 caps", "category": "supplements", "price": Decimal("499.00"),
     "stock_quantity": 200, "wallet_eligible": False, "rewards_eligible": True, "benefit_program_id": None},
    {"id": 3, "name": "Annual Health Checkup Voucher", "category": "services", "price": Decimal("3499.00"),
     "stock_quantity": 25, "wallet_eligible": True, "rewards_eligible": False, "benefit_program_id": "flex-preventive"},
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.get(UserModel, DEMO_USER["id"]) is None:
            db.add(UserModel(**DEMO_USER))
            logger.info(f"Seeded demo customer {DEMO_USER['name']}")

        for data in DEMO_PRODUCTS:
            if db.get(ProductModel, data["id"]) is None:
                db.add(ProductModel(**data))
                logger.info(f"Seeded product {data['name']}")

        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
