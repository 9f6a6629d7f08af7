"""Seed de desarrollo: sucursal, un usuario por rol y categorias de caja chica.

Uso: python -m portal.init_db
"""
import logging
from decimal import Decimal

from portal.database import SessionLocal, engine, Base
from portal.logging_config import configure_logging
from portal.models import Branch, PettyCashCategory, Role, User
from portal.security import get_password_hash

logger = logging.getLogger(__name__)

DEV_PASSWORD = "password"

CATEGORIES = [
    ("STATIONERY", "Office Stationery", Decimal("5000"), 1),
    ("TRANSPORT", "Local Transport", Decimal("3000"), 2),
    ("POSTAGE", "Postage & Courier", Decimal("2000"), 3),
]


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        # 1. Sucursal
        branch = db.query(Branch).filter(Branch.name == "Head Office").first()
        if not branch:
            branch = Branch(name="Head Office", region="Nairobi", address="Nairobi CBD")
            db.add(branch)
            db.commit()
            db.refresh(branch)
            logger.info("Branch %s created", branch.name)

        # 2. Un usuario por rol
        for role in Role:
            email = f"{role.value.replace('_', '.')}@kechita.co.ke"
            if db.query(User).filter(User.email == email).first():
                continue
            db.add(User(
                email=email,
                full_name=role.value.replace("_", " ").title(),
                password_hash=get_password_hash(DEV_PASSWORD),
                role=role,
                branch_id=branch.id,
                is_active=True,
            ))
            logger.info("User %s created", email)
        db.commit()

        # 3. Categorias de caja chica
        for code, name, limit, order in CATEGORIES:
            if db.query(PettyCashCategory).filter(PettyCashCategory.code == code).first():
                continue
            db.add(PettyCashCategory(code=code, name=name, max_per_transaction=limit, order=order))
        db.commit()
        logger.info("Seed finished")
    except Exception:
        logger.exception("Seed failed")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    init_db()
