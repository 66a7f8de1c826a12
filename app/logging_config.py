import logging
import logging.config
import re

_BEARER_RE = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9\-._~+/]+=*")
_SECRET_KV_RE = re.compile(
    r"(?i)\b(authorization|x-api-key|x-goog-api-key|api_key|apikey|secret|key)\b\s*[:=]\s*([^\s,;]+)"
)
_PROVIDER_KEY_RE = re.compile(r"\b(sk-[A-Za-z0-9\-_]{8,}|AIza[0-9A-Za-z\-_]{20,}|pg_[A-Za-z0-9\-_]{16,})")


def redact(text: str) -> str:
    """Mask bearer tokens and anything that looks like a provider or access key"""
    text = _BEARER_RE.sub("Bearer [redacted]", text)
    text = _SECRET_KV_RE.sub(r"\1=[redacted]", text)
    text = _PROVIDER_KEY_RE.sub("[redacted_key]", text)
    return text


class RedactionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        record.msg = redact(message)
        record.args = ()
        return True


def configure_logging(log_level: str) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "redact": {"()": "app.logging_config.RedactionFilter"},
            },
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s"
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "filters": ["redact"],
                    "level": log_level,
                }
            },
            "loggers": {
                "app": {"handlers": ["console"], "level": log_level, "propagate": False},
                "uvicorn": {"level": log_level},
            },
        }
    )
