"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from markshare.api.v1.endpoints import (
    auth,
    exams,
    marks,
    reports,
    school,
    seed,
    students,
)

api_router = APIRouter()

# Authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

# Classes and subjects
api_router.include_router(
    school.router,
    tags=["Classes & Subjects"],
)

# Exams
api_router.include_router(
    exams.router,
    prefix="/exams",
    tags=["Exams"],
)

# Students
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

# Marks
api_router.include_router(
    marks.router,
    prefix="/marks",
    tags=["Marks"],
)

# Reports
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["Reports"],
)

# Seeding
api_router.include_router(
    seed.router,
    prefix="/seed",
    tags=["Seeding"],
)
