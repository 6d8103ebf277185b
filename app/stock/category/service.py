from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from loguru import logger

from app.errors import Conflict, InvalidArgument, storage_errors
from . import models, schemas

# ================= CREATE =================
def create_category(db: Session, category: schemas.CategoryCreate):
    name = category.name.strip()
    if not name:
        raise InvalidArgument("Le nom de la catégorie est obligatoire.")

    with storage_errors(db, "checking category name"):
        existing = (
            db.query(models.Category)
            .filter(models.Category.name == name)
            .first()
        )

    if existing:
        raise Conflict(f"La catégorie '{name}' existe déjà.")

    db_category = models.Category(
        name=name,
        description=category.description
    )

    try:
        db.add(db_category)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict(f"La catégorie '{name}' existe déjà.") from e

    db.refresh(db_category)
    logger.info(f"Category {db_category.id_category} ({name}) created")
    return db_category


# ================= LIST =================
def list_categories(db: Session):
    with storage_errors(db, "listing categories"):
        return db.query(models.Category).order_by(models.Category.name).all()
