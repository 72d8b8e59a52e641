import sys
import json
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI

from groundwater_engine.api.analysis import router as analysis_router
from groundwater_engine.config.mongo_client import mongo_client
from groundwater_engine.config.settings import API_HOST, API_PORT
from groundwater_engine.jobs.station_analysis import run_analysis
from groundwater_engine.schemas.analysis_models import AnalysisRequest
from groundwater_engine.utils.logger import setup_logger

logger = setup_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle manager: the store connection is opened lazily on first use
    and closed on shutdown.
    """
    yield
    mongo_client.close()

# --- 1. API CONFIGURATION (Accessed by Uvicorn) ---
app = FastAPI(title="Groundwater Trend & Availability Engine", version="1.0.0", lifespan=lifespan)

app.include_router(analysis_router)

@app.get("/health")
def health_check():
    """Health check for the Analysis Service"""
    return {"status": "active", "service": "Groundwater Analysis Engine", "model_type": "ensemble"}

# --- 2. CLI JOB RUNNER ---
def run_analyze_job(payload_path: str) -> str:
    """Runs one analysis from a JSON payload file and returns the result JSON."""
    payload = json.loads(Path(payload_path).read_text(encoding="utf-8"))
    request = AnalysisRequest.model_validate(payload)
    result = run_analysis(request)
    return result.model_dump_json(indent=2)

def main(argv=None):
    """
    Main Entry Point for CLI jobs.
    Usage: python -m groundwater_engine.main <job_name> [args]
    Jobs:
        analyze <payload.json>   Run one analysis and print the result JSON
        serve                    Start the API with uvicorn
    """
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        logger.error("No job specified. Usage: python -m groundwater_engine.main <job_name> [args]")
        sys.exit(1)

    job_name = argv[0]
    logger.info(f"Starting Groundwater Engine. Job: {job_name}")

    try:
        if job_name == "analyze":
            if len(argv) < 2:
                logger.error("Usage: python -m groundwater_engine.main analyze <payload.json>")
                sys.exit(1)
            print(run_analyze_job(argv[1]))
        elif job_name == "serve":
            import uvicorn
            uvicorn.run(app, host=API_HOST, port=API_PORT)
        else:
            logger.warning(f"Job {job_name} not recognized.")

    except Exception:
        logger.exception("Critical Job Failure")
        sys.exit(1)

if __name__ == "__main__":
    main()
