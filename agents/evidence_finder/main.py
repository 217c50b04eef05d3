from .ir import router as ir_router
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from common.config import Config
from common.logging import logger

# -----------------------------------------------------------
# FASTAPI APP SETUP
# -----------------------------------------------------------
app = FastAPI(title="Evidence Case Finder")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ir_router, tags=["search"])

if not Config.EXA_API_KEY:
    logger.warning(
        "EXA_API_KEY is not set. Evidence search will return no Exa results.")
if not Config.COURTLISTENER_API_TOKEN:
    logger.warning(
        "COURTLISTENER_API_TOKEN is not set. Evidence search will be degraded.")
