import os
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from core import db, errors, uploads
from core.logging_config import setup_logging
from places import router as places_router
from users import router as users_router

setup_logging()


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "*").strip() or "*"
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One store handle per process, shared by all requests.
    database = db.Database(db.database_url())
    await database.open()
    app.state.db = database
    try:
        await database.ensure_schema()
        yield
    finally:
        await database.close()


app = FastAPI(title="Places API", lifespan=lifespan)

# Added first so CORSMiddleware wraps it and 500s still carry CORS headers.
app.add_middleware(errors.UnhandledErrorMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
)

errors.register_exception_handlers(app)

api_router = APIRouter(prefix="/api")
api_router.include_router(places_router.router, tags=["places"])
api_router.include_router(users_router.router, tags=["users"])
app.include_router(api_router)

app.mount(
    "/uploads/images",
    StaticFiles(directory=str(uploads.upload_dir()), check_dir=False),
    name="uploads",
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "places api"}
