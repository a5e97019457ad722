"""
Product Catalog local server

Serves the Lambda handlers over HTTP with FastAPI: each route turns the
request into an API Gateway style event and returns the handler's response
unchanged. The same app runs on Lambda through Mangum (see lambda_handler).

    uvicorn product_catalog.main:app --port 4000
"""

import time
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from product_catalog.core.config import settings
from product_catalog.core.logging_config import log_response, set_request_id, setup_logging
from product_catalog.handlers import (
    create_product,
    delete_product,
    featured_products,
    get_product_by_id,
    list_products,
    low_stock_products,
    products_by_category,
    products_by_group,
    search_products,
    update_product,
)
from product_catalog.handlers.base import get_product_service
from product_catalog.services.product_service import ProductService
from product_catalog.utils.response_formatter import generate_request_id
from product_catalog.utils.timestamps import utc_now_iso

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Product catalog API for the grocery storefront",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag logs with a request id and record latency"""
    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    set_request_id(request_id)

    start_time = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start_time) * 1000

    response.headers["X-Request-ID"] = request_id
    log_response(logger, request.method, request.url.path, response.status_code, duration_ms)
    return response


async def build_event(request: Request, path_parameters: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """API Gateway (REST) proxy event for ``request``"""
    body = await request.body()
    return {
        "httpMethod": request.method,
        "path": request.url.path,
        "headers": dict(request.headers),
        "queryStringParameters": dict(request.query_params) or None,
        "pathParameters": path_parameters,
        "body": body.decode("utf-8") if body else None,
        "isBase64Encoded": False,
    }


def to_response(result: Dict[str, Any]) -> Response:
    headers = dict(result.get("headers") or {})
    media_type = headers.pop("Content-Type", "application/json")
    if result["statusCode"] == 204:
        return Response(status_code=204, headers=headers)
    return Response(
        content=result.get("body", ""),
        status_code=result["statusCode"],
        headers=headers,
        media_type=media_type,
    )


async def dispatch(
    handle: Callable[..., Awaitable[Dict[str, Any]]],
    request: Request,
    service: ProductService,
    path_parameters: Optional[Dict[str, str]] = None,
) -> Response:
    event = await build_event(request, path_parameters)
    return to_response(await handle(event, service))


# =============================================================================
# Routes
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    timestamp: str


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        service=settings.PROJECT_NAME,
        environment=settings.ENVIRONMENT,
        timestamp=utc_now_iso(),
    )


@app.post("/product")
async def create_product_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(create_product.handle, request, service)


@app.put("/product")
async def update_product_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(update_product.handle, request, service)


@app.put("/product/{product_id}")
async def update_product_by_path_route(
    product_id: str, request: Request, service: ProductService = Depends(get_product_service)
):
    return await dispatch(update_product.handle, request, service, {"id": product_id})


@app.delete("/product")
async def delete_product_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(delete_product.handle, request, service)


@app.delete("/product/{product_id}")
async def delete_product_by_path_route(
    product_id: str, request: Request, service: ProductService = Depends(get_product_service)
):
    return await dispatch(delete_product.handle, request, service, {"id": product_id})


@app.get("/product")
async def list_products_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(list_products.handle, request, service)


@app.get("/product/{product_id}")
async def get_product_route(
    product_id: str, request: Request, service: ProductService = Depends(get_product_service)
):
    return await dispatch(get_product_by_id.handle, request, service, {"id": product_id})


@app.get("/products/search")
async def search_products_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(search_products.handle, request, service)


@app.get("/products/featured")
async def featured_products_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(featured_products.handle, request, service)


@app.get("/products/low-stock")
async def low_stock_products_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(low_stock_products.handle, request, service)


@app.get("/getProductByCategory")
async def products_by_category_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(products_by_category.handle, request, service)


@app.get("/productByGroupId")
async def products_by_group_route(request: Request, service: ProductService = Depends(get_product_service)):
    return await dispatch(products_by_group.handle, request, service)


if __name__ == "__main__":
    uvicorn.run(
        "product_catalog.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=not settings.is_production,
    )
