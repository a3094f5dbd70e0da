"""CareerFlow application package.

Job-seeker tooling built on a hosted LLM: LinkedIn post generation, resume
analysis against a job description, skill-gap learning roadmaps and
turn-based mock interviews, each with per-user history.

Notes:
    1. This module does not contain any functions or classes of its own.
    2. The application logic lives in submodules:
       - app.core: settings, security primitives, authentication and the error taxonomy.
       - app.database: engine and session management.
       - app.models: SQLAlchemy models for users, history records and interview sessions.
       - app.llm: prompt assembly, structured invocation and the four generation flows.
       - app.api.routes: FastAPI routers and their route logic.
    3. No disk, network, or database access occurs in this module directly.

"""
