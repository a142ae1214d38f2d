"""Category API routes: admin writes, public reads."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ewm.database import get_db
from ewm.exceptions import ConflictError, NotFoundError
from ewm.models.category import Category
from ewm.models.event import Event
from ewm.schemas.category import CategoryCreate, CategoryOut

logger = logging.getLogger(__name__)
admin_router = APIRouter()
public_router = APIRouter()


def _get_category(db: Session, cat_id: str) -> Category:
    category = db.query(Category).filter(Category.id == cat_id).first()
    if not category:
        raise NotFoundError(f"Category with id={cat_id} was not found")
    return category


def _check_name_free(db: Session, name: str, exclude_id: str | None = None) -> None:
    query = db.query(Category).filter(Category.name == name)
    if exclude_id:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ConflictError(f"Category name already exists: {name}")


@admin_router.post("/", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    _check_name_free(db, payload.name)
    category = Category(name=payload.name)
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.name)
    return category


@admin_router.patch("/{cat_id}", response_model=CategoryOut)
def update_category(cat_id: str, payload: CategoryCreate, db: Session = Depends(get_db)):
    category = _get_category(db, cat_id)
    _check_name_free(db, payload.name, exclude_id=cat_id)
    category.name = payload.name
    db.commit()
    db.refresh(category)
    logger.info("Renamed category %s to %s", cat_id, category.name)
    return category


@admin_router.delete("/{cat_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(cat_id: str, db: Session = Depends(get_db)):
    category = _get_category(db, cat_id)
    if db.query(Event.id).filter(Event.category_id == cat_id).first():
        raise ConflictError("The category is not empty")
    db.delete(category)
    db.commit()
    logger.info("Deleted category %s", cat_id)


@public_router.get("/", response_model=list[CategoryOut])
def list_categories(
    offset: int = Query(0, alias="from", ge=0),
    size: int = Query(10, ge=1),
    db: Session = Depends(get_db),
):
    return db.query(Category).order_by(Category.name).offset(offset).limit(size).all()


@public_router.get("/{cat_id}", response_model=CategoryOut)
def get_category(cat_id: str, db: Session = Depends(get_db)):
    return _get_category(db, cat_id)
