# =============================================
#  FBA LEDGER API - ENTRYPOINT
# =============================================
#
#   GET /                      banner
#   GET /ledger?start=&end=    ledger report summary + raw rows
#   GET /inventory             current FBA inventory snapshot
#   GET /api/ping              health check

import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

import config
from routes import register_inventory_routes, register_ledger_routes

# --- Logging configuration ---
LOG_DIR = Path(__file__).parent / "logs"
LOG_FILE_PATH = LOG_DIR / "fba_ledger.log"

root_logger = logging.getLogger()
logger = root_logger
if not root_logger.handlers:
    LOG_DIR.mkdir(exist_ok=True)
    root_logger.setLevel(config.LOG_LEVEL)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    file_handler = RotatingFileHandler(
        LOG_FILE_PATH,
        maxBytes=5_000_000,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

logging.getLogger("uvicorn").propagate = True
logging.getLogger("uvicorn.error").propagate = True
logging.getLogger("uvicorn.access").propagate = True
# --- End logging configuration ---

app = FastAPI(title=config.APP_NAME, version=config.APP_VERSION)

register_ledger_routes(app)
register_inventory_routes(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def home() -> PlainTextResponse:
    return PlainTextResponse(
        "FBA Ledger API OK. Use endpoint: GET /ledger?start=YYYY-MM-DD&end=YYYY-MM-DD "
        "or /inventory for current stock"
    )


@app.get("/api/ping")
def ping() -> JSONResponse:
    ts = datetime.now(timezone.utc).isoformat()
    logger.info("[PING] ping called")
    return JSONResponse({"ok": True, "ts": ts})


def run() -> None:
    logger.info("FBA Ledger API running on http://localhost:%s", config.PORT)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
