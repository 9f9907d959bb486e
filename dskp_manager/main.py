import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dskp_manager.config import Config
from dskp_manager.database import engine, init_db
from dskp_manager.models import school # Register models with Base
from dskp_manager.routes import subjects, ai

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Init DB
    await init_db()
    yield
    # Shutdown
    await engine.dispose()

app = FastAPI(title="DSKP Subject Manager", lifespan=lifespan)

origins = [
    Config.FRONTEND_URL,
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# Global Exception Handler so CORS headers are present even on 500 errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global Exception: {exc}", exc_info=True)
    response = JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error", "message": str(exc)},
    )
    origin = request.headers.get("origin")
    if origin in origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(subjects.router) # Prefix defined in router
app.include_router(ai.router)

@app.get("/")
def root():
    return {"message": "DSKP Subject Manager Online"}
