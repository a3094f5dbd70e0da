import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from careerflow.app.api.routes.history import router as history_router
from careerflow.app.api.routes.interview import router as interview_router
from careerflow.app.api.routes.linkedin_post import router as linkedin_post_router
from careerflow.app.api.routes.resume import router as resume_router
from careerflow.app.api.routes.resume_analysis import router as resume_analysis_router
from careerflow.app.api.routes.skill_gap import router as skill_gap_router
from careerflow.app.api.routes.user import router as user_router
from careerflow.app.middleware import refresh_session_middleware

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.

    Notes:
        1. Initialize the FastAPI application with the title "CareerFlow API".
        2. Register the sliding-session cookie middleware.
        3. Add CORS middleware.
        4. Include the user, post, resume, analysis, roadmap, interview, and
           history routers.
        5. Define a health check endpoint at "/health".

    """
    _msg = "Creating FastAPI application"
    log.debug(_msg)

    app = FastAPI(title="CareerFlow API")

    app.middleware("http")(refresh_session_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(user_router)
    app.include_router(linkedin_post_router)
    app.include_router(resume_router)
    app.include_router(resume_analysis_router)
    app.include_router(skill_gap_router)
    app.include_router(interview_router)
    app.include_router(history_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    _msg = "FastAPI application created successfully"
    log.debug(_msg)
    return app


app = create_app()
