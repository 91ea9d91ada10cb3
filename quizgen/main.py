import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quizgen.api.routes.health import router as health_router
from quizgen.api.routes.quiz import router as quiz_router
from quizgen.api.routes.sessions import router as sessions_router
from quizgen.core.config import get_settings
from quizgen.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.app_env != "dev")

    app = FastAPI(
        title="Quiz Generator API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(health_router)
    app.include_router(quiz_router)
    app.include_router(sessions_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "quizgen.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
