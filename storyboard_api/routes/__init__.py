from fastapi import APIRouter

api_router = APIRouter()

# Import route modules here
from storyboard_api.routes import projects, budgets, schedules

api_router.include_router(projects.router)
api_router.include_router(budgets.router)
api_router.include_router(schedules.router)
