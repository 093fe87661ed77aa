"""
Website Strategy Analyzer - Main Application

A FastAPI service that scrapes a marketing website, runs business-framework
analyses (Golden Circle, Elements of Value, CliftonStrengths, revenue
trends) through Gemini / Claude, collects Lighthouse and Trends data and
assembles everything into a comprehensive report.
"""

import logging
from contextlib import asynccontextmanager

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables
load_dotenv()

from config import settings
from core.browser import BrowserHandle
from core.errors import AnalysisError
from analyzer.pipeline import AnalysisPipeline
from api.routes import router
from utils.clients.llm import LLMClient

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    browser = BrowserHandle()
    http_client = httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT,
        follow_redirects=True,
        headers={"User-Agent": settings.USER_AGENT},
    )
    app.state.pipeline = AnalysisPipeline(
        llm=LLMClient(),
        browser=browser,
        http_client=http_client,
    )
    logger.info("🚀 Website Strategy Analyzer started")
    try:
        yield
    finally:
        await http_client.aclose()
        await browser.close()
        logger.info("🛑 Website Strategy Analyzer stopped")


# Initialize FastAPI app
app = FastAPI(title="Website Strategy Analyzer", lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = ", ".join(".".join(str(p) for p in e.get("loc", ())[1:]) or "body" for e in errors)
    message = f"Invalid request: {fields}" if fields else "Invalid request"
    if errors:
        message += f" ({errors[0].get('msg', '')})"
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "VALIDATION_ERROR", "message": message},
    )


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, timeout_keep_alive=60)
