# marketplace/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from marketplace.api.deps import AjaxUnauthorized, LoginRequired
from marketplace.api.routers import carts, catalog, health, orders, password_reset, sellers, users
from marketplace.api.views import redirect, text
from marketplace.utils.settings import SECRET_KEY, SESSION_COOKIE, SESSION_HTTPS_ONLY
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


async def login_required_handler(request: Request, exc: LoginRequired):
    return redirect(exc.login_url)


async def ajax_unauthorized_handler(request: Request, exc: AjaxUnauthorized):
    return JSONResponse(status_code=401, content={"success": False})


async def store_failure_handler(request: Request, exc: SQLAlchemyError):
    #endpointy AJAX lapia bledy bazy same i zwracaja {"success": false}
    logger.exception(f"Blad bazy danych dla {request.method} {request.url.path}")
    return text("Wystąpił błąd serwera", status_code=500)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace",
        version="1.0.0",
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=SECRET_KEY,
        session_cookie=SESSION_COOKIE,
        https_only=SESSION_HTTPS_ONLY,
    )

    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(AjaxUnauthorized, ajax_unauthorized_handler)
    app.add_exception_handler(SQLAlchemyError, store_failure_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(password_reset.router)
    app.include_router(catalog.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(sellers.router)

    return app
