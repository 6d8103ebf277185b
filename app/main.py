from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from app.config import settings
from app.database import init_db
from app.errors import register_exception_handlers
from app.stock.products.router import router as product_router
from app.stock.category.router import router as category_router


import uvicorn
import os
import sys
from dotenv import load_dotenv
from contextlib import asynccontextmanager


from pathlib import Path

# Find .env even in frozen or packaged mode
POSSIBLE_ENV_PATHS = [
    Path(__file__).resolve().parent.parent / ".env",        # normal
    Path(sys.executable).resolve().parent / ".env",         # frozen exe
    Path.cwd() / ".env",                                   # runtime cwd
]

for env_path in POSSIBLE_ENV_PATHS:
    if env_path.exists():
        load_dotenv(env_path, override=True)
        break
else:
    logger.warning(".env file not found, using defaults and process environment")


if settings.LOG_FILE:
    logger.add(settings.LOG_FILE, rotation="500 MB", level=settings.LOG_LEVEL)


# Ensure upload folder exists
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)


# Database startup
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")
    init_db()
    yield
    logger.info("Application shutdown")

# Create app
app = FastAPI(
    title="PRODUCT CATALOG API",
    description="An API for browsing and managing the product catalog: listing, search, creation with image upload and soft delete.",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Uploaded product images, referenced as /uploads/<filename>
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


# Routers
app.include_router(product_router, prefix="/products", tags=["Products"])
app.include_router(category_router, prefix="/categories", tags=["Categories"])


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    logger.info(f"Running on {settings.SERVER_IP}:{settings.SERVER_PORT}")
    uvicorn.run("app.main:app", host=settings.SERVER_IP, port=settings.SERVER_PORT)
