import sentry_sdk
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from slowapi.middleware import SlowAPIMiddleware

from foodcity.api import health
from foodcity.api.v1 import addons, admin, auth, cart, careers, coupons, orders, payments, products, users
from foodcity.core.config import settings
from foodcity.core.error_handlers import register_exception_handlers
from foodcity.core.logging_config import configure_logging
from foodcity.core.rate_limiter import limiter
from foodcity.middleware.http import register_http_middleware

configure_logging()
logger = structlog.get_logger()

if settings.ENVIRONMENT == "production" and settings.SENTRY_DSN:
    try:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            traces_sample_rate=0.1,
            integrations=[FastApiIntegration(), SqlalchemyIntegration()],
        )
        logger.info("sentry_initialized")
    except Exception as exc:
        logger.warning("sentry_init_failed", error=str(exc))

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

cors_origins = list(settings.BACKEND_CORS_ORIGINS)
if settings.FRONTEND_URL and settings.FRONTEND_URL not in cors_origins:
    cors_origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-CSRF-Token", "X-Correlation-ID"],
    expose_headers=["X-Process-Time", "X-Correlation-ID"],
    max_age=3600,
)

register_http_middleware(app)
register_exception_handlers(app)

API_ROUTERS = (
    (auth.router, "auth", "Authentication"),
    (products.router, "products", "Menu"),
    (addons.router, "addons", "Add-ons"),
    (cart.router, "cart", "Cart"),
    (coupons.router, "coupons", "Coupons"),
    (orders.router, "orders", "Orders"),
    (payments.router, "payments", "Payments"),
    (users.router, "users", "Users"),
    (careers.router, "careers", "Careers"),
    (admin.router, "admin", "Admin"),
)

for router, prefix, tag in API_ROUTERS:
    app.include_router(router, prefix=f"{settings.API_V1_STR}/{prefix}", tags=[tag])

app.include_router(health.router, tags=["Health"])


@app.get("/")
def root():
    return {
        "message": settings.PROJECT_NAME,
        "docs": f"{settings.API_V1_STR}/docs",
        "version": health.API_VERSION,
    }
