#!/usr/bin/env python3
"""EZ Forms - form builder and response collection API"""

import uvicorn
from fastapi import FastAPI
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from ez_forms.config import config
from ez_forms.errors import register_exception_handlers
from ez_forms.logging_config import get_logger, setup_logging
from ez_forms.routers.auth import router as auth_router
from ez_forms.routers.forms import router as forms_router
from ez_forms.routers.health import health

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = get_logger(__name__)


app = FastAPI(
    title="EZ Forms",
    description="Build forms with typed fields, publish them under a short address, "
    "control who can see them, and collect validated responses",
    version="1.0.0",
    license_info={
        "name": "MIT",
    },
)

# Trust proxy headers so request.client reflects the original caller
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

register_exception_handlers(app)

# Include routers
app.include_router(health)
app.include_router(auth_router)
app.include_router(forms_router)


if __name__ == "__main__":
    port = config.get("port")
    logger.info(f"Starting EZ Forms on 0.0.0.0:{port}")
    logger.info(f"Health check available at /health")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
