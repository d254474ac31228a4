"""
FastAPI Application Entry Point

Evidence Miner API
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from evidence_miner.core.config import settings
from evidence_miner.core.logging import setup_logging
from evidence_miner.core.rate_limit import limiter, rate_limit_exceeded_handler
from evidence_miner.api.reviews import router as reviews_router

setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="PubMed evidence retrieval, enrichment and review synthesis",
    version="1.0.0"
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.include_router(reviews_router)

origins = [
    "http://localhost:4200",
    "http://localhost:5173",
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/")
async def health_check():
    """Root endpoint to verify the server is running."""
    return {
        "status": "active",
        "project": settings.PROJECT_NAME,
        "version": "1.0.0",
        "rate_limiting": {
            "enabled": limiter.enabled,
            "storage": settings.rate_limit_storage_uri
        },
        "endpoints": {
            "analyze": "/api/analyze",
            "search": "/api/search",
            "review": "/api/reviews",
            "review_stream": "/api/reviews/stream",
            "review_status": "/api/reviews/status",
            "export": "/api/reviews/export"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
