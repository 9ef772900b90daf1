# main.py
import logging
import os

from dotenv import load_dotenv
# load .env before db.py reads DATABASE_URL
load_dotenv()
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from db import init_db
from routers import routers
from utils.exceptions import (
    NoteTreeError,
    app_exception_handler,
    generic_exception_handler,
    storage_exception_handler,
    validation_exception_handler,
)

import uvicorn


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="NoteTree", version="0.1.0")

app.add_exception_handler(NoteTreeError, app_exception_handler)
app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # credentials cannot be combined with a wildcard origin
    allow_credentials="*" not in cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# register routers
for router in routers:
    app.include_router(router)


@app.get("/health")
def health():
    return {"ok": True, "service": "notetree-backend"}


# create tables once at startup (uvicorn main:app)
init_db()
logger.info("NoteTree API ready")

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        reload=True,
    )
