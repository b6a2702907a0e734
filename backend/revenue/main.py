from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from revenue.core.config import settings
from revenue.core.database import init_db
from revenue.api import batches, files, health
from revenue.api.deps import register_exception_handlers

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(health.router, prefix=settings.API_V1_PREFIX, tags=["health"])
app.include_router(batches.router, prefix=settings.API_V1_PREFIX, tags=["batches"])
app.include_router(files.router, prefix=settings.API_V1_PREFIX, tags=["files"])


@app.on_event("startup")
def on_startup():
    init_db()


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
