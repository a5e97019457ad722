"""
AWS Lambda entry point serving the whole catalog API behind one function.
Per-route functions can use the ``handler`` of each module in
product_catalog.handlers instead.
"""

import logging

from mangum import Mangum

from product_catalog.core.config import settings
from product_catalog.main import app

logger = logging.getLogger(__name__)

logger.info(f"Initializing product catalog Lambda handler (env={settings.ENVIRONMENT}, region={settings.AWS_REGION})")

# lifespan="off": no startup/shutdown events on Lambda
handler = Mangum(app, lifespan="off")
