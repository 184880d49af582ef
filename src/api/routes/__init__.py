from fastapi import FastAPI

from . import admin, applications, auth, courses, health, reviews


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(courses.router)
    app.include_router(applications.router)
    app.include_router(reviews.router)
    app.include_router(admin.router)
