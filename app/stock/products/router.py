from fastapi import APIRouter, Body, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.errors import ServiceError, error_response
from app.stock.history.schemas import StockHistoryOut
from app.stock.products import schemas, service


router = APIRouter()


@router.get("", response_model=schemas.ProductPage)
def list_products(
    offset: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
):
    try:
        result = service.list_products(db, offset=offset, limit=limit)
    except ServiceError as e:
        return error_response(e, envelope=True)

    return schemas.ProductPage(
        data=[schemas.ProductOut.model_validate(p) for p in result["data"]],
        page=result["page"],
        limit=result["limit"],
        total=result["total"],
        total_pages=result["total_pages"],
    )


@router.get("/scroll", response_model=schemas.ProductScroll)
def scroll_products(
    cursor: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Cursor pagination: pass the previous page's ``nextCursor`` back as
    ``cursor``. An empty page returns ``nextCursor: null``.
    """
    try:
        result = service.list_products_by_cursor(db, cursor=cursor, limit=limit)
    except ServiceError as e:
        return error_response(e, envelope=True)

    return schemas.ProductScroll(
        data=[schemas.ProductOut.model_validate(p) for p in result["data"]],
        limit=result["limit"],
        total=result["total"],
        next_cursor=result["next_cursor"],
    )


@router.get("/search", response_model=List[schemas.ProductDetailOut])
def search_products(
    query: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
):
    products = service.search_products(db, query, limit=limit)
    return [schemas.ProductDetailOut.model_validate(p) for p in products]


@router.get("/category/{category_name}", response_model=List[schemas.ProductOut])
def list_products_by_category(
    category_name: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
):
    try:
        products = service.list_by_category(db, category_name, page=page, limit=limit)
    except ServiceError as e:
        return error_response(e, envelope=True)

    return [schemas.ProductOut.model_validate(p) for p in products]


@router.get("/{product_id}", response_model=schemas.ProductDetailOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return schemas.ProductDetailOut.model_validate(service.get_product(db, product_id))


@router.post(
    "",
    response_model=schemas.ProductCreated,
    status_code=status.HTTP_201_CREATED
)
def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    code_product: Optional[str] = Form(None, alias="codeProduct"),
    price: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    id_category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    form = schemas.ProductCreateForm(
        name=name,
        description=description,
        code_product=code_product,
        price=price,
        stock=stock,
        id_category=id_category,
    )

    try:
        product, history = service.create_product(db, form, image)
    except ServiceError as e:
        return error_response(e, envelope=True)

    return schemas.ProductCreated(
        message="Produit créé avec succès",
        product=schemas.ProductOut.model_validate(product),
        stock_history=StockHistoryOut.model_validate(history),
    )


@router.put("/{product_id}", response_model=schemas.ProductMutation)
def update_product(
    product_id: int,
    changes: Optional[schemas.ProductUpdate] = Body(None),
    db: Session = Depends(get_db),
):
    # A missing body is an empty update
    product = service.update_product(db, product_id, changes or schemas.ProductUpdate())
    return schemas.ProductMutation(
        message="Produit mis à jour avec succès",
        product=schemas.ProductOut.model_validate(product),
    )


@router.delete("/{product_id}", response_model=schemas.ProductMutation)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product = service.delete_product(db, product_id)
    return schemas.ProductMutation(
        message="Produit supprimé avec succès",
        product=schemas.ProductOut.model_validate(product),
    )
