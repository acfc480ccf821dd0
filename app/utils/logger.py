import logging
import sys
import os
from types import FrameType
from loguru import logger
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry._logs import set_logger_provider

# Stdlib loggers whose own handlers are replaced by the loguru bridge.
# Service modules that use logging.getLogger(__name__) reach loguru through the root logger.
BRIDGED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "gunicorn.error",
    "gunicorn.access",
    "fastapi",
    "sqlalchemy.engine",
)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> <level>{level}</level>: "
    "<cyan>[{name}:{line}]</cyan> - <level>{message}</level>"
)


def get_log_level() -> str:
    """Console and export level, from LOG_LEVEL (default INFO)."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


class InterceptHandler(logging.Handler):
    """
    Forward stdlib logging records to loguru.

    Records emitted by the OpenTelemetry SDK itself are dropped; exporting them
    through the OTel sink would feed back into the SDK.
    """

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith("opentelemetry"):
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging():
    """
    Route every log record through loguru.

    Installs the stdlib bridge on the root logger and on the server and
    database loggers, configures a colored stderr sink, and adds an OTLP log
    sink when OTEL_EXPORTER_OTLP_ENDPOINT is set. A failing OTLP setup is
    reported on stderr and never stops the application.

    Returns:
        The configured loguru logger.
    """
    level = get_log_level()
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)

    for name in BRIDGED_LOGGERS:
        bridged = logging.getLogger(name)
        bridged.handlers = []
        bridged.propagate = False
        bridged.addHandler(InterceptHandler())

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=CONSOLE_FORMAT,
        colorize=True,
        enqueue=True,
    )

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        try:
            resource = Resource.create(
                {
                    "service.name": os.getenv("OTEL_SERVICE_NAME", "rental-api"),
                    "deployment.environment": os.getenv("DEPLOYMENT_ENV", "production"),
                }
            )

            logger_provider = LoggerProvider(resource=resource)
            set_logger_provider(logger_provider)

            insecure = (
                os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true"
            )
            exporter = OTLPLogExporter(endpoint=endpoint, insecure=insecure)
            logger_provider.add_log_record_processor(BatchLogRecordProcessor(exporter))

            otel_handler = LoggingHandler(
                level=logging.getLevelName(level), logger_provider=logger_provider
            )
            logger.add(otel_handler, level=level, serialize=True)

            logger.info("Log export to OTLP enabled.")

        except Exception as e:
            print(f"OTLP log setup failed: {e}", file=sys.stderr)

    return logger
