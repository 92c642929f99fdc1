from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from marketplace.api.deps import session_user
from marketplace.api.views import redirect, render, text
from marketplace.data.database import get_db
from marketplace.domain.errors import NotFoundError
from marketplace.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


def _logged_in(request: Request) -> bool:
    return session_user(request) is not None


@router.get("/")
def root():
    return redirect("/home")


@router.get("/home")
def home(request: Request, db: Session = Depends(get_db)):
    return render(
        "home",
        login=_logged_in(request),
        products_by_category=CatalogService(db).home(),
    )


@router.get("/categories")
def categories(request: Request, db: Session = Depends(get_db)):
    return render("categories", login=_logged_in(request), categories=CatalogService(db).categories())


@router.get("/category/{name}")
def category(name: str, request: Request, db: Session = Depends(get_db)):
    return render(
        "category",
        login=_logged_in(request),
        category=name,
        products=CatalogService(db).category(name),
    )


@router.get("/product/{product_id}")
def product(product_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        found = CatalogService(db).product(product_id)
    except NotFoundError:
        return text("Product not found", status_code=404)
    return render("product", login=_logged_in(request), product=found)


@router.get("/search")
def search(
    request: Request,
    q: str = Query("", max_length=100),
    db: Session = Depends(get_db),
):
    return render(
        "results",
        login=_logged_in(request),
        query=q,
        products=CatalogService(db).search(q),
    )
