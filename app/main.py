from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from app.core.config import settings
from app.api import webhook, tools
from app.api.deps import get_client_directory
from app.core.logger import setup_logging, logger
from contextlib import asynccontextmanager
from datetime import datetime, timezone

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: fail fast if the tenant directory can't be built
    directory = get_client_directory()
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} with {len(directory)} tenant(s)")
    yield
    logger.info("🛑 Shutting down webhook")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"🔥 UNHANDLED ERROR: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error", "detail": "An unexpected error occurred. Please contact support."}
    )

app.include_router(webhook.router, tags=["Webhook"])
app.include_router(tools.router, tags=["Tools"])

@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Retell Cal.com webhook is running!"

@app.get("/health")
async def health_check():
    return {"status": "ok", "environment": settings.ENVIRONMENT, "time": datetime.now(timezone.utc).isoformat()}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
