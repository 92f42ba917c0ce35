"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from counseling.api.v1.endpoints import (
    academic_results,
    analysis,
    interviews,
    reports,
    scales,
    students,
    tasks,
)

api_router = APIRouter()

# Academic results import
api_router.include_router(
    academic_results.router,
    prefix="/academic-results",
    tags=["Academic Results"],
)

# Results analysis
api_router.include_router(
    analysis.router,
    prefix="/analysis",
    tags=["Analysis"],
)

# Reports, exports and print views
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["Reports"],
)

# Students, with their behavior logs, interviews and attendance
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

api_router.include_router(
    interviews.router,
    prefix="/interviews",
    tags=["Interviews"],
)

# Counselor action plan
api_router.include_router(
    tasks.router,
    prefix="/tasks",
    tags=["Follow-up Tasks"],
)

# Psychometric questionnaires
api_router.include_router(
    scales.router,
    prefix="/scales",
    tags=["Scales"],
)
