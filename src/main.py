import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
from config.app_vars import LOG_LEVEL
from config.middleware import ScopedCORSMiddleware
from routers import shipping_router, webhook_router
from utils.exceptions import InvalidDataError
from utils.sendcloud import get_sendcloud_client

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("fastapi")
app = FastAPI()

# Webhooks come from Sendcloud's servers, never from a browser
app.add_middleware(
    ScopedCORSMiddleware,
    exempt_prefixes=[webhook_router.prefix],
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidDataError)
async def invalid_data_handler(request: Request, exc: InvalidDataError):
    # Reached when a dependency fails to build, e.g. missing Sendcloud keys
    logger.error(f"Unhandled invalid data on {request.url.path}: {exc.message}")
    return ORJSONResponse(
        content={"message": exc.message},
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
    )


@app.get("/")
async def health_check():
    resp = {}
    resp["server_health"] = "Sendcloud Fulfillment Service API health OK"

    try:
        client = get_sendcloud_client()
        connected = await client.test_connection()
    except InvalidDataError as e:
        logger.error(f"Sendcloud client unavailable: {e.message}")
        connected = False
    resp["sendcloud_health"] = "OK" if connected else "disconnected"

    return ORJSONResponse(content=resp, status_code=HTTPStatus.OK)


app.include_router(webhook_router)
app.include_router(shipping_router)
