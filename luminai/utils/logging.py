"""structlog configuration for the LuminAI service.

Every event carries ``service`` and ``env`` fields so that log lines from
several deployments can share one sink.  Development gets the coloured
console renderer; production (or ``json_output=True``) gets one JSON object
per line.  Standard-library loggers, which uvicorn, httpx, openai and
chromadb write to, are routed through the same renderer.
"""

import logging
import sys

import structlog

SERVICE_NAME = "luminai"

# Client libraries that log every request at INFO.
_NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "openai", "chromadb", "posthog")


def _service_fields(service: str, env: str) -> structlog.types.Processor:
    def add_service_fields(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        event_dict.setdefault("env", env)
        return event_dict

    return add_service_fields


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    app_env: str = "development",
    service: str = SERVICE_NAME,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib bridge.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON rendering regardless of *app_env*.
        app_env: Deployment environment; ``"production"`` selects JSON.
        service: Value of the ``service`` field on every event.

    Returns:
        A logger bound to the configured pipeline.
    """
    level = logging.getLevelName(log_level.upper())
    use_json = json_output or app_env == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _service_fields(service, app_env),
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if use_json:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        shared_processors.append(structlog.dev.set_exc_info)
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return structlog.get_logger(logger_name=service)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger tagged with *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
