from fastapi import FastAPI

from app.api.local_documents import router as local_documents_router
from app.api.s3 import router as s3_router
from app.config import warn_missing_s3_config
from app.errors import register_error_handlers
from app.logging import configure_logging
from app.services.object_storage import s3_available

app = FastAPI(title="Faculty Document Storage API")
configure_logging()
register_error_handlers(app)

app.include_router(s3_router, prefix="/api")
app.include_router(local_documents_router, prefix="/api")


@app.on_event("startup")
def _report_storage_configuration() -> None:
    warn_missing_s3_config()


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok", "s3_configured": s3_available()}
