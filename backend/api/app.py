"""FastAPI application factory.

Routers
-------
Both endpoint groups are mounted at the root:

    POST /generate  Crawl a site and return its business-profile record
    GET  /check     Report whether the summarisation model is configured
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.routers import check as check_router
from backend.api.routers import profile as profile_router


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="bizprofile API",
        description=(
            "Turns a small-business website into a structured business-profile "
            "record: contact details, hours, licensing, social presence, "
            "lead-capture entry point and trust signals."
        ),
        version="0.1.0",
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(profile_router.router, tags=["profile"])
    app.include_router(check_router.router, tags=["check"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn backend.api.app:app --reload
app = create_app()
