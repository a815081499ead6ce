"""FastAPI application for monitoring."""
from fastapi import FastAPI, Request
import logging
import time
from plantcare.core.config import settings
from plantcare.core.log import configure_logging
from plantcare.api.routes import health

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Plant Care Bot API", version="1.0.0")


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests and responses."""
    start_time = time.time()

    logger.info(f"→ {request.method} {request.url.path}")

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(f"← {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"← {request.method} {request.url.path} - ERROR after {process_time:.3f}s: {str(e)}")
        raise


app.include_router(health.router)


@app.get("/")
async def root():
    return {"status": "ok", "service": "plantcare-bot"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.api_port)
