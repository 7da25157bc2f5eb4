import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from evshop.api import cart as cart_routes
from evshop.api import orders as order_routes
from evshop.api import products as product_routes
from evshop.core.config import settings
from evshop.core.errors import ShopError
from evshop.version import VERSION

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("evshop")

app = FastAPI(title="PowerEV Shop", version=VERSION)
Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app).expose(app, include_in_schema=False)

@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/v1/_info")
def info():
    return {"service": "evshop", "version": VERSION}

@app.on_event("startup")
async def startup_event():
    for route in app.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            logger.debug("%s %s", sorted(route.methods), route.path)

app.include_router(product_routes.router, prefix="/products", tags=["products"])
app.include_router(cart_routes.router, prefix="/cart", tags=["cart"])
app.include_router(order_routes.router, prefix="/orders", tags=["orders"])
