from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.telemetry import snapshot_counts
from shared.config import settings_dict

from .routes import auth, imports, templates


description = """
Ad Template Catalog API.

Templates reach the catalog two ways:
1. **import** a CSV of system templates (classified and de-duplicated).
2. Save a completed ad-creation task as a private **template**.

Any visible template can then be edited, duplicated, shared and
materialized into a **launch** payload.
"""

app = FastAPI(
    title="Ad Template Catalog API",
    description=description,
    version="0.1.0",
    openapi_tags=[
        {"name": "auth", "description": "Authentication"},
        {"name": "templates", "description": "Template catalog and launch"},
        {"name": "imports", "description": "Bulk import logs"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(imports.router)
app.include_router(templates.router)


@app.get("/health", tags=["meta"])
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/settings", tags=["meta"])
def settings() -> dict:
    return settings_dict()


@app.get("/metrics/summary", tags=["meta"])
def metrics_summary() -> dict[str, int]:
    return snapshot_counts()
