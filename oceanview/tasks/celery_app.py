from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery

from oceanview.core.config import settings


def _redis_url_for_celery(url: str) -> str:
    """Celery requires ssl_cert_reqs for rediss:// (e.g. Upstash TLS)."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        return urlunparse(parsed._replace(query=urlencode(qs, doseq=True)))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "oceanview",
    broker=_redis_url,
    backend=_redis_url,
    include=["oceanview.tasks.jobs"],
)

celery.conf.timezone = "UTC"

celery.conf.beat_schedule = {
    "send-departure-reminders-daily": {
        "task": "oceanview.tasks.jobs.send_departure_reminders",
        "schedule": 86400.0,
    },
}
