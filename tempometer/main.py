"""FastAPI application - serves the tempo API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tempometer.api.schemas import HealthResponse
from tempometer.api.upload import router as upload_router

app = FastAPI(title="Tempometer", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    from tempometer.config import settings
    uvicorn.run(
        "tempometer.main:app",
        host=settings.host,
        port=settings.port,
    )
