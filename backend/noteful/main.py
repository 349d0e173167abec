import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from noteful.api import auth, folders, notes, tags, users
from noteful.config import Settings, configure_logging
from noteful.services.errors import AccountValidationError, NotefulError, ValidationError
from noteful.services.validation import error_from
from noteful.storage.document_store import DocumentStore, StoreError

logger = logging.getLogger(__name__)


async def handle_noteful_error(request: Request, exc: NotefulError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # bodies FastAPI itself rejects (e.g. malformed JSON) get the same envelope
    error_cls = AccountValidationError if request.url.path.startswith(users.router.prefix) else ValidationError
    return await handle_noteful_error(request, error_from(exc.errors(), error_cls))


async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Noteful API")
    app.state.settings = settings
    app.state.store = store or DocumentStore(settings.data_dir)

    app.add_exception_handler(NotefulError, handle_noteful_error)
    app.add_exception_handler(StoreError, handle_store_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(notes.router)
    app.include_router(folders.router)
    app.include_router(tags.router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
