"""Block until the configured Postgres accepts connections (imported by start_api.py)."""
import logging
import time
from urllib.parse import urlparse

import psycopg2

from oceanview.core.config import settings

logger = logging.getLogger("wait_for_db")
logging.basicConfig(level=logging.INFO, format="[wait_for_db] %(message)s")

# SQLAlchemy URL may start with postgresql+psycopg2://
p = urlparse(settings.DATABASE_URL.replace("postgresql+psycopg2://", "postgresql://"))

host = p.hostname or "db"
port = p.port or 5432
user = p.username or "oceanview"
password = p.password or "oceanview"
dbname = (p.path or "/oceanview").lstrip("/") or "oceanview"

start = time.time()
logger.info("Waiting for Postgres at %s:%s db=%s user=%s (timeout=%ss)", host, port, dbname, user, settings.DB_WAIT_TIMEOUT)
while True:
    try:
        psycopg2.connect(host=host, port=port, user=user, password=password, dbname=dbname).close()
        logger.info("Postgres is ready.")
        break
    except psycopg2.OperationalError as e:
        if time.time() - start > settings.DB_WAIT_TIMEOUT:
            logger.error("Timed out waiting for DB. Last error: %s", e)
            raise
        time.sleep(1)
