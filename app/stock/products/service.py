import math
from typing import Optional

from fastapi import UploadFile
from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.config import settings
from app.database import ensure_connection
from app.errors import Conflict, Internal, InvalidArgument, NotFound, storage_errors
from app.stock.category.models import Category
from app.stock.history.models import MovementType, StockHistory
from app.stock.products import pagination, schemas
from app.stock.products.models import Product
from app.stock.related import models as related_models  # noqa: F401  (registers relation mappers)
from app.uploads import stored_image


NOT_FOUND_MESSAGE = "Produit non trouvé."
SEARCH_TERM_MESSAGE = "Veuillez fournir un terme de recherche."
REQUIRED_FIELDS_MESSAGE = (
    "Les champs obligatoires (name, codeProduct, price, stock, id_category) doivent être remplis"
)
NUMERIC_FIELDS_MESSAGE = "Les champs price, stock et id_category doivent être des nombres valides"


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _active(query):
    return query.filter(Product.is_deleted.is_(False))


def _with_relations(query):
    return query.options(
        joinedload(Product.category),
        selectinload(Product.order_details),
        selectinload(Product.product_reviews),
        selectinload(Product.stock_history),
        selectinload(Product.cart),
        selectinload(Product.wishlist),
        selectinload(Product.order_returns),
    )


def to_float(value) -> Optional[float]:
    """Coerce a form/JSON value to a finite float, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_int(value) -> Optional[int]:
    """Coerce a form/JSON value to an int that fits the column, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        number = int(value)
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            return None
    # stock and id_category are INTEGER columns
    return number if pagination.fits_integer_column(number) else None


def _check_category(db: Session, id_category: int):
    with storage_errors(db, "looking up category"):
        category = (
            db.query(Category)
            .filter(Category.id_category == id_category)
            .first()
        )

    if not category:
        raise InvalidArgument(f"La catégorie {id_category} n'existe pas.")
    return category


def _code_taken(db: Session, code_product: str) -> bool:
    with storage_errors(db, "checking product code"):
        return (
            db.query(Product.id_product)
            .filter(Product.code_product == code_product)
            .first()
        ) is not None


def _get_active_product(db: Session, product_id: int, with_relations: bool = False) -> Product:
    # Ids outside the column range cannot exist
    if not pagination.fits_integer_column(product_id):
        logger.warning(f"Product not found: {product_id}")
        raise NotFound(NOT_FOUND_MESSAGE)

    query = db.query(Product)
    if with_relations:
        query = _with_relations(query)

    with storage_errors(db, f"loading product {product_id}"):
        product = query.filter(Product.id_product == product_id).first()

    # Missing and soft-deleted rows look the same to callers
    if not product or product.is_deleted:
        logger.warning(f"Product not found: {product_id}")
        raise NotFound(NOT_FOUND_MESSAGE)

    return product


# --------------------------------------------------
# Listing
# --------------------------------------------------
def list_products(db: Session, offset=None, limit=None) -> dict:
    offset, limit = pagination.parse_offset_limit(
        0 if offset is None else offset,
        settings.DEFAULT_PAGE_LIMIT if limit is None else limit,
    )

    with storage_errors(db, "listing products"):
        products = (
            _active(db.query(Product))
            .order_by(Product.id_product.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        # Total counts every row, soft-deleted ones included
        total = db.query(func.count(Product.id_product)).scalar()

    return {
        "data": products,
        "page": pagination.page_number(offset, limit),
        "limit": limit,
        "total": total,
        "total_pages": pagination.total_pages(total, limit),
    }


def list_products_by_cursor(db: Session, cursor=None, limit=None) -> dict:
    limit = pagination.parse_limit(settings.DEFAULT_PAGE_LIMIT if limit is None else limit)
    cursor = pagination.parse_cursor(cursor)

    with storage_errors(db, "scrolling products"):
        query = _active(db.query(Product)).order_by(Product.id_product.asc())
        if cursor is not None:
            # Start strictly after the cursor row, even if it has since been deleted
            query = query.filter(Product.id_product > cursor)

        products = query.limit(limit).all()
        total = db.query(func.count(Product.id_product)).scalar()

    return {
        "data": products,
        "limit": limit,
        "total": total,
        "next_cursor": products[-1].id_product if products else None,
    }


def search_products(db: Session, query: Optional[str], limit=None):
    """
    Case-insensitive substring search on product names, with every
    relation expanded. Soft-deleted products never match.
    """
    if not query or not query.strip():
        raise InvalidArgument(SEARCH_TERM_MESSAGE)

    limit = pagination.parse_limit(settings.SEARCH_LIMIT if limit is None else limit)
    # Blank queries are rejected above; matching uses the text as sent
    term = query.lower()

    with storage_errors(db, f"searching products for {term!r}", message="Erreur serveur"):
        ensure_connection(db)
        products = (
            _active(_with_relations(db.query(Product)))
            .filter(func.lower(Product.name).contains(term, autoescape=True))
            .order_by(Product.id_product.asc())
            .limit(limit)
            .all()
        )

    return products


def get_product(db: Session, product_id: int) -> Product:
    return _get_active_product(db, product_id, with_relations=True)


def list_by_category(db: Session, category_name: str, page=None, limit=None):
    page, limit = pagination.parse_page_limit(
        1 if page is None else page,
        settings.CATEGORY_PAGE_LIMIT if limit is None else limit,
    )

    with storage_errors(db, f"listing category {category_name!r}", message="Erreur serveur"):
        products = (
            _active(db.query(Product))
            .join(Product.category)
            .filter(Category.name == category_name)
            .order_by(Product.id_product.asc())
            .offset(pagination.page_offset(page, limit))
            .limit(limit)
            .all()
        )

    return products


# --------------------------------------------------
# Create
# --------------------------------------------------
def create_product(
    db: Session,
    form: schemas.ProductCreateForm,
    image: Optional[UploadFile] = None,
):
    """
    Create a product and its opening stock-history row.

    The image is validated and stored first; any later failure removes it
    again. Product and history are committed together or not at all.
    """
    with stored_image(image) as stored:
        if not (form.name and form.code_product and form.price and form.stock and form.id_category):
            raise InvalidArgument(REQUIRED_FIELDS_MESSAGE)

        if _code_taken(db, form.code_product):
            logger.warning(f"Duplicate product code rejected: {form.code_product}")
            raise Conflict(f'Le code produit "{form.code_product}" est déjà utilisé.')

        price = to_float(form.price)
        stock = to_int(form.stock)
        id_category = to_int(form.id_category)

        if price is None or stock is None or id_category is None:
            raise InvalidArgument(NUMERIC_FIELDS_MESSAGE)

        if price < 0 or stock < 0:
            raise InvalidArgument("Le prix et le stock ne peuvent pas être négatifs.")

        _check_category(db, id_category)

        db_product = Product(
            name=form.name,
            description=form.description,
            code_product=form.code_product,
            price=price,
            stock=stock,
            image=stored.public_path if stored else None,
            id_category=id_category,
        )

        try:
            db.add(db_product)
            db.flush()  # assigns id_product inside the open transaction

            history = StockHistory(
                id_product=db_product.id_product,
                quantity_before=0,
                quantity_after=stock,
                movement_type=MovementType.ADDED,
            )
            db.add(history)

            db.commit()
        except IntegrityError as e:
            db.rollback()
            if _code_taken(db, form.code_product):
                # Lost a race against another create with the same code
                logger.warning(f"Duplicate product code rejected on commit: {form.code_product}")
                raise Conflict(f'Le code produit "{form.code_product}" est déjà utilisé.') from e
            logger.exception("Integrity error while creating product")
            raise Internal(error=type(e).__name__) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Error while creating product")
            raise Internal(error=type(e).__name__) from e

    db.refresh(db_product)
    db.refresh(history)

    logger.info(f"Product {db_product.id_product} ({db_product.code_product}) created with stock {stock}")
    return db_product, history


# --------------------------------------------------
# Update / delete
# --------------------------------------------------
def update_product(db: Session, product_id: int, changes: schemas.ProductUpdate) -> Product:
    db_product = _get_active_product(db, product_id)

    update_data = changes.model_dump(exclude_unset=True)

    if "name" in update_data and update_data["name"] is None:
        raise InvalidArgument("Le champ name ne peut pas être vide.")

    if "price" in update_data:
        update_data["price"] = to_float(update_data["price"])
    if "stock" in update_data:
        update_data["stock"] = to_int(update_data["stock"])
    if "id_category" in update_data:
        update_data["id_category"] = to_int(update_data["id_category"])

    for field in ("price", "stock", "id_category"):
        if field in update_data and update_data[field] is None:
            raise InvalidArgument(NUMERIC_FIELDS_MESSAGE)

    if update_data.get("price", 0) < 0 or update_data.get("stock", 0) < 0:
        raise InvalidArgument("Le prix et le stock ne peuvent pas être négatifs.")

    if "id_category" in update_data and update_data["id_category"] != db_product.id_category:
        _check_category(db, update_data["id_category"])

    for field, value in update_data.items():
        setattr(db_product, field, value)

    with storage_errors(db, f"updating product {product_id}"):
        db.commit()
        db.refresh(db_product)

    logger.info(f"Product {product_id} updated: {sorted(update_data)}")
    return db_product


def delete_product(db: Session, product_id: int) -> Product:
    db_product = _get_active_product(db, product_id)

    db_product.is_deleted = True

    with storage_errors(db, f"deleting product {product_id}"):
        db.commit()
        db.refresh(db_product)

    logger.info(f"Product {product_id} soft-deleted")
    return db_product
