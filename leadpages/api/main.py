"""
LEADPAGES — FastAPI app
Démarrer : uvicorn leadpages.api.main:app --reload --port 8001
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s — %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="LEADPAGES — Landing pages & lead capture", version=__version__, docs_url="/docs")

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.on_event("startup")
def startup():
    from ..database import init_db
    init_db()
    log.info("DB initialisée (SQLite)")


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}


# ── Routers ──
from .routes import analytics, builder, pages, submissions  # noqa: E402

app.include_router(pages.router)
app.include_router(submissions.router)
app.include_router(analytics.router)
app.include_router(builder.router)
