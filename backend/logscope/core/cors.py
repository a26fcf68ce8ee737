from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from logscope.core.config import settings


def setup_cors(app: FastAPI) -> None:
    """Allow the viewer front-end to call the API."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
