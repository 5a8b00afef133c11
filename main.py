import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from dependencies import get_event_bus
from logging_config import configure_logging
from routers import inventory_router, stock_alerts_router
from services.exceptions import InventoryError

configure_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

# HTTP status per ledger error kind
ERROR_STATUS = {
     "ProductNotFound": 404,
     "TransactionNotFound": 404,
     "InvalidQuantity": 400,
     "InvalidReason": 400,
     "InsufficientStock": 409,
     "ConcurrencyConflict": 409,
     "PersistenceFailure": 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
     yield
     # Deliver queued stock_changed events before the worker pool goes away
     get_event_bus().shutdown()


# App instance
app = FastAPI(title="Inventory Ledger", lifespan=lifespan)

# CORS
app.add_middleware(
     CORSMiddleware,
     allow_origins=config.CORS_ORIGINS,
     allow_credentials=True,
     allow_methods=["*"],
     allow_headers=["*"],
)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
     return JSONResponse(
          status_code=ERROR_STATUS.get(exc.kind, 400),
          content={"error": exc.to_dict()},
     )


app.include_router(inventory_router)
app.include_router(stock_alerts_router)


@app.get("/api/health")
def health():
     return {"status": "ok"}


# 404 Fallback for unmatched routes
@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
     if exc.status_code == 404 and exc.detail == "Not Found":
          return JSONResponse(status_code=404, content={"error": "Route not found"})
     return await http_exception_handler(request, exc)


@app.middleware("http")
async def error_middleware(request: Request, call_next):
     try:
          return await call_next(request)
     except Exception:
          logger.exception("Unhandled error on %s %s", request.method, request.url.path)
          return JSONResponse(status_code=500, content={"error": "Internal server error"})


if __name__ == "__main__":
     uvicorn.run("main:app", host="0.0.0.0", port=config.PORT, reload=True)
