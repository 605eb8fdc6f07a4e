"""
Club Roster Admin - FastAPI web server

Club member administration API:
- Roster bulk import (name extraction + registry matching)
- Manual add / removal of club members

Data source: Supabase
"""
from datetime import datetime

from fastapi import FastAPI
from loguru import logger
from dotenv import load_dotenv

from app.club import club_router

load_dotenv()

app = FastAPI(
    title="Club Roster Admin",
    description="Club membership administration with roster bulk import",
    version="1.0.0"
)

# Club Management router
app.include_router(club_router, prefix="/api")


@app.get("/health")
async def health():
    """Liveness check"""
    return {"status": "ok", "time": datetime.now().isoformat()}


@app.on_event("startup")
async def startup():
    logger.info("Club Roster Admin server started")


# ==================== Server ====================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
