"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from planner.config import get_settings
from planner.database import init_db
from planner.errors import PlannerError
from planner.routers import allocations, auth, capacity, employees, projects, sprints

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title="Sprint Resource Planner",
    description="Sprint capacity, allocation placement and derived project timelines",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlannerError)
async def planner_error_handler(request: Request, exc: PlannerError):
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.message})


app.include_router(auth.router)
app.include_router(sprints.router)
app.include_router(capacity.router)
app.include_router(allocations.router)
app.include_router(projects.router)
app.include_router(employees.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
