"""
RingCentral Session Gateway - Main Application Entry Point

FastAPI application that links chat bot users to RingCentral accounts through
OAuth and serves their directory data to the bot.
"""

import argparse
import os
import sys
import time
import yaml
from contextlib import asynccontextmanager
from logging.config import dictConfig
from pathlib import Path
from typing import Optional

import fastapi
import uvicorn
from dotenv import load_dotenv
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

# Configure path for imports
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

from auth import AuthManager, AuthConfig, AuthenticationMiddleware, DEFAULT_EXEMPT_PATHS
from core.context import ServiceContext
from core.errors import (
    GatewayError, InvalidCallback, TokenExchangeFailure, ListFetchFailure, ChatDeliveryError
)
from directory import DirectoryConfig
from models import ErrorDetail, ErrorResponse, GatewayErrorType
from platform_client import PlatformConfig
from sessions import DEFAULT_TOKEN_NAMESPACE
from utils import (
    LogRecord, LogEvent, ColoredConsoleFormatter, JSONFormatter,
    init_logger, debug, info, warning, error
)

# Import routers
from routers.oauth import create_oauth_router
from routers.bot import create_bot_router
from routers.health import create_health_router

load_dotenv()

# Rich console for startup display
_console = Console()

PROJECT_ROOT = Path(__file__).parent.parent

# Environment variables that override config.yaml secrets
ENV_OVERRIDES = {
    "RC_SERVER_URL": ("platform", "server_url"),
    "RC_CLIENT_ID": ("platform", "client_id"),
    "RC_CLIENT_SECRET": ("platform", "client_secret"),
    "RC_REDIRECT_URI": ("platform", "redirect_uri"),
}

# ===== CONFIGURATION =====

class Settings:
    """Application settings loaded from config.yaml with environment overrides."""

    def __init__(self, config_path: str = "config.yaml"):
        # Default values
        self.log_level: str = "INFO"
        self.log_file_path: str = ""
        self.log_color: bool = True
        self.host: str = "127.0.0.1"
        self.port: int = 8080
        self.app_name: str = "rc-session-gateway"
        self.app_version: str = "0.1.0"

        # Authentication settings
        self.auth_enabled: bool = False
        self.auth_api_key: str = ""
        self.auth_exempt_paths: list = list(DEFAULT_EXEMPT_PATHS)

        # Platform, chat and storage
        self.platform = PlatformConfig()
        self.directory = DirectoryConfig()
        self.chat_bot_token: str = ""
        self.token_store_backend: str = "memory"
        self.token_store_service_name: str = "rc-session-gateway"
        self.token_store_namespace: str = DEFAULT_TOKEN_NAMESPACE
        self.redis_url: Optional[str] = None

        self.load_from_config(config_path)
        self.load_from_env()

    def load_from_config(self, config_path: str):
        """Load settings from configuration file."""
        config = load_config(config_path)

        settings_config = config.get('settings') or {}
        for key, value in settings_config.items():
            if key != "auth" and hasattr(self, key):
                # Relative log paths are resolved against the project root
                if key == "log_file_path" and value and not os.path.isabs(value):
                    value = str(PROJECT_ROOT / value)
                setattr(self, key, value)

        auth_config = settings_config.get('auth') or {}
        if auth_config:
            self.auth_enabled = auth_config.get('enabled', False)
            self.auth_api_key = auth_config.get('api_key', "")
            self.auth_exempt_paths = auth_config.get('exempt_paths', self.auth_exempt_paths)

        for key, value in (config.get('platform') or {}).items():
            if hasattr(self.platform, key):
                setattr(self.platform, key, value)

        for key, value in (config.get('directory') or {}).items():
            if hasattr(self.directory, key):
                setattr(self.directory, key, value)

        chat_config = config.get('chat') or {}
        self.chat_bot_token = chat_config.get('bot_token', self.chat_bot_token)

        store_config = config.get('token_store') or {}
        self.token_store_backend = store_config.get('backend', self.token_store_backend)
        self.token_store_service_name = store_config.get('service_name', self.token_store_service_name)
        self.token_store_namespace = store_config.get('namespace', self.token_store_namespace)
        self.redis_url = store_config.get('redis_url', self.redis_url)

    def load_from_env(self):
        """Secrets from the environment (or .env) win over the config file."""
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                setattr(getattr(self, section), key, value)

        self.chat_bot_token = os.getenv("GLIP_BOT_TOKEN") or self.chat_bot_token
        self.redis_url = os.getenv("REDIS_URL") or self.redis_url
        self.auth_api_key = os.getenv("GATEWAY_API_KEY") or self.auth_api_key


def load_config(config_path: str = "config.yaml") -> dict:
    """Load full configuration from file. A missing or unreadable file yields {}."""
    if not os.path.isabs(config_path):
        config_path = PROJECT_ROOT / config_path

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    except (OSError, yaml.YAMLError) as e:
        warning(LogRecord(
            event=LogEvent.CONFIG_LOAD_FAILED.value,
            message=f"Failed to load settings from {config_path}, using defaults",
            data={"config_path": str(config_path)},
        ), exc=e)
        return {}


def setup_logging(settings: Settings) -> dict:
    """Setup logging configuration."""
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colored_console": {"()": ColoredConsoleFormatter, "use_colors": settings.log_color},
            "json": {"()": JSONFormatter},
            "uvicorn_access": {"()": "utils.logging.formatters.UvicornAccessFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": "colored_console",
                "stream": "ext://sys.stdout",
            },
            "uvicorn_access": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "uvicorn_access",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            settings.app_name: {
                "level": settings.log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["uvicorn_access"],
                "propagate": False,
            },
        },
    }

    # Add file handler if configured
    if settings.log_file_path:
        log_config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": settings.log_level,
            "formatter": "json",
            "filename": settings.log_file_path,
            "mode": "a",
            "encoding": "utf-8",
        }
        log_config["loggers"][settings.app_name]["handlers"].append("file")

    dictConfig(log_config)
    return log_config

# ===== ERROR MAPPING =====

# Checked in order; subclasses before their bases
_ERROR_STATUS = [
    (InvalidCallback, 400, GatewayErrorType.INVALID_CALLBACK),
    (TokenExchangeFailure, 502, GatewayErrorType.TOKEN_EXCHANGE_FAILED),
    (ListFetchFailure, 502, GatewayErrorType.FETCH_FAILED),
    (ChatDeliveryError, 502, GatewayErrorType.CHAT_DELIVERY_FAILED),
]


def error_response(status_code: int, error_type: GatewayErrorType, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(type=error_type, message=message, status_code=status_code))
    return JSONResponse(content=body.model_dump(mode="json", exclude_none=True), status_code=status_code)


def gateway_error_status(exc: GatewayError):
    for exc_type, status_code, error_type in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code, error_type
    return 500, GatewayErrorType.API_ERROR

# ===== FASTAPI APPLICATION =====

@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """FastAPI lifespan event handler."""
    info(LogRecord(
        event=LogEvent.FASTAPI_STARTUP_COMPLETE.value,
        message="FastAPI application startup complete"
    ))

    yield

    info(LogRecord(
        event=LogEvent.FASTAPI_SHUTDOWN.value,
        message="FastAPI application shutting down"
    ))
    await app.state.context.close()


def create_app(config_path: str = "config.yaml", context: Optional[ServiceContext] = None,
               settings: Optional[Settings] = None) -> fastapi.FastAPI:
    """Create FastAPI application. A prebuilt context replaces the one built from settings."""
    local_settings = settings or Settings(config_path)

    # Initialize logging
    init_logger(local_settings.app_name)
    setup_logging(local_settings)

    local_context = context or ServiceContext.from_settings(local_settings)
    local_auth_manager = AuthManager(AuthConfig(
        enabled=local_settings.auth_enabled,
        api_key=local_settings.auth_api_key,
        exempt_paths=local_settings.auth_exempt_paths
    ))

    app = fastapi.FastAPI(
        title=local_settings.app_name,
        version=local_settings.app_version,
        description="OAuth session gateway linking chat bot users to RingCentral accounts",
        lifespan=lifespan,
    )

    # Store components in app state for access by handlers
    app.state.settings = local_settings
    app.state.context = local_context
    app.state.auth_manager = local_auth_manager

    if local_auth_manager.is_enabled():
        if not local_auth_manager.has_api_key():
            warning(LogRecord(
                event=LogEvent.AUTH_FAILED.value,
                message="Authentication enabled without an API key; every protected request will be rejected"
            ))
        app.add_middleware(AuthenticationMiddleware, auth_manager=local_auth_manager)

    # Register routers
    app.include_router(create_oauth_router(local_context))
    app.include_router(create_bot_router(local_context))
    app.include_router(create_health_router(local_context, local_settings.app_name, local_settings.app_version))

    # Exception handlers
    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        status_code, error_type = gateway_error_status(exc)
        warning(LogRecord(
            event=exc.error_type,
            message=f"{request.method} {request.url.path} failed: {exc}",
            data={"status_code": status_code},
        ))
        return error_response(status_code, error_type, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        messages = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
        return error_response(400, GatewayErrorType.INVALID_REQUEST, "; ".join(messages))

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        error(LogRecord(
            event=LogEvent.UNHANDLED_ERROR.value,
            message=f"Unhandled error on {request.method} {request.url.path}",
        ), exc=exc)
        return error_response(500, GatewayErrorType.API_ERROR, "Internal server error")

    # Request logging middleware
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        debug(LogRecord(
            event=LogEvent.HTTP_REQUEST.value,
            message=f"{request.method} {request.url.path}",
            data={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time": round(process_time, 3),
            },
        ))
        return response

    return app

# ===== STARTUP BANNER =====

def display_startup_banner(settings: Settings):
    """Display startup banner with configuration info."""
    _console.print(Rule(f"[bold green]{settings.app_name}[/bold green]", style="green"))

    log_file_display = "Disabled"
    if settings.log_file_path:
        try:
            log_file_display = str(Path(settings.log_file_path).relative_to(PROJECT_ROOT))
        except ValueError:
            log_file_display = Path(settings.log_file_path).name

    auth_status = "enabled" if settings.auth_enabled else "disabled"
    config_text = Text.assemble(
        ("   Version       : ", "default"),
        (f"v{settings.app_version}", "bold cyan"),
        ("\n   Platform      : ", "default"),
        (settings.platform.server_url, "default"),
        ("\n   Client ID     : ", "default"),
        ("configured" if settings.platform.client_id else "missing", "bold green" if settings.platform.client_id else "bold red"),
        ("\n   Redirect URI  : ", "default"),
        (settings.platform.redirect_uri, "default"),
        ("\n   Bot Token     : ", "default"),
        ("configured" if settings.chat_bot_token else "missing", "bold green" if settings.chat_bot_token else "bold red"),
        ("\n   Token Store   : ", "default"),
        (settings.token_store_backend, "yellow"),
        ("\n   API Auth      : ", "default"),
        (auth_status, "green" if settings.auth_enabled else "dim"),
        ("\n   Log Level     : ", "default"),
        (settings.log_level.upper(), "yellow"),
        ("\n   Log File      : ", "default"),
        (log_file_display, "dim"),
        ("\n   Listening on  : ", "default"),
        (f"http://{settings.host}:{settings.port}", "default")
    )

    _console.print(Panel(
        config_text,
        title="RingCentral Session Gateway Configuration",
        border_style="blue",
        expand=False,
    ))
    _console.print(Rule("Starting uvicorn server ...", style="dim blue"))

# ===== COMMAND LINE INTERFACE =====

def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='RingCentral Session Gateway')
    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '--port',
        type=int,
        help='Port to run the server on (overrides config file)'
    )
    parser.add_argument(
        '--host',
        type=str,
        help='Host to bind the server to (overrides config file)'
    )
    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    settings = Settings(args.config)
    if args.port:
        settings.port = args.port
    if args.host:
        settings.host = args.host

    app = create_app(args.config, settings=settings)
    display_startup_banner(settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=setup_logging(settings),
    )


if __name__ == "__main__":
    main()
