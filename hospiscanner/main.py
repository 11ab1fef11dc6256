import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.api import api_router
from .core.config import get_cors_origins, get_log_level

logging.basicConfig(level=get_log_level(), format='%(asctime)s %(levelname)s %(name)s: %(message)s')

app = FastAPI(title="HospiScanner API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)
