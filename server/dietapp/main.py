import json
import logging
import os
from datetime import datetime, timezone

from bson import ObjectId
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from dietapp.routers import assessment, recommendation
from dietapp.services.validation_service import AssessmentValidationError, issues_from_pydantic

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]


# Custom JSON encoder for MongoDB ObjectId and datetime
class MongoJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, ObjectId):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class MongoJSONResponse(JSONResponse):
    def render(self, content) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
            cls=MongoJSONEncoder,
        ).encode("utf-8")


app = FastAPI(title="Diet Assessment API", version="1.0.0", default_response_class=MongoJSONResponse)

app.add_middleware(GZipMiddleware, minimum_size=1000)

# CORS middleware to allow frontend communication
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(assessment.router)
app.include_router(recommendation.router)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    errors = issues_from_pydantic(exc.errors())
    logger.info(f"Rejected {request.method} {request.url.path}: {[e.field for e in errors]}")
    return MongoJSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": [e.model_dump() for e in errors],
        },
    )


@app.exception_handler(AssessmentValidationError)
async def _business_validation_handler(request: Request, exc: AssessmentValidationError):
    return MongoJSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": [e.model_dump() for e in exc.errors],
        },
    )


@app.on_event("startup")
def _app_startup():
    # Ensure assessment indexes exist (idempotent)
    assessment._ensure_indexes()


@app.get("/")
def home():
    return {"message": "Diet Assessment API Running"}


@app.get("/health")
def health_check():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
