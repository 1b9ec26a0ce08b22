from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from herbcey.utils.logger_config import setup_logging
from herbcey.routers import orders, payments, management, analytics

# Configure logger
setup_logging(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="HerbCey Admin API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:8501").split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(orders.router)
app.include_router(payments.router)
app.include_router(management.router)
app.include_router(analytics.router)


@app.get("/")
def read_root():
    return {"status": "ok", "service": "backend"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
