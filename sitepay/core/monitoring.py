import sentry_sdk

from sitepay.core.config import settings


def configure_error_monitoring() -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.2)


def capture_data_source_failure(exc: Exception) -> None:
    """Report a failed store read; no-op when Sentry is not configured."""
    if settings.sentry_dsn:
        sentry_sdk.capture_exception(exc)
