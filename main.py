from fastapi import FastAPI
from shortlink_app.config import settings
from shortlink_app.logging_config import setup_logging
from shortlink_app.api.v1 import links, redirect

setup_logging(settings.log_level)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Create short links with a validity window and track their clicks",
    debug=settings.debug
)

@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}




######## Include routers
app.include_router(links.router, prefix="/api/v1")
app.include_router(redirect.router)
