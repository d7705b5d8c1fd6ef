from fastapi import FastAPI

from .routes import topology


def create_app() -> FastAPI:
    app = FastAPI(title="overture-pgr")
    app.include_router(topology.router, prefix="/topology", tags=["topology"])
    return app
