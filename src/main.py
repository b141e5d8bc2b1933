"""
src/main.py
============================================
FastAPI Application for Smart Lighting Control
============================================

Entry point of the lamp fleet service. Devices push light readings and
heartbeats over HTTP; operators and the dashboard use the same REST API to
control lamps, switch modes and browse the control log.

Architecture Overview:
---------------------
- REST API: devices, sensors, logs and settings routers
- WebSocket: operational logs and state transitions on /logs/stream
- Database: SQLAlchemy sessions per request, commits owned by the services

Errors raised by the services (src/Core/errors.py) are turned into
``{"success": false, "error": "<kind>", "message": "..."}`` responses here.
"""

# Environment Configuration
from dotenv import load_dotenv
import os
load_dotenv()

# FastAPI Core
from fastapi import FastAPI, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
import asyncio
from sqlalchemy.exc import SQLAlchemyError

from src.Core.config import settings
from src.Core.errors import CoreError, InvalidArgument, PersistenceFailure
from src.Core import log_ws
from src.Controller.Routes import devices, sensors, logs
from src.Controller.Routes import settings as settings_routes
from src.DB.database import test_db_connection, create_all_tables
from src.DB.session import SessionLocal
from src.Schemas.settings import Error_response
from src.Services.settings_store import settings_store


# ============================================================
# ROOT PATH HANDLING
# ============================================================

ROOT_PATH = os.getenv("ROOT_PATH", "").strip()
if ROOT_PATH:
    if not ROOT_PATH.startswith("/"):
        ROOT_PATH = "/" + ROOT_PATH
    if ROOT_PATH.endswith("/"):
        ROOT_PATH = ROOT_PATH[:-1]


class StripPrefixMiddleware(BaseHTTPMiddleware):
    """
    Remove ROOT_PATH from incoming request paths so the service can sit
    behind a reverse proxy subdirectory without changing route definitions.

    Example:
        ROOT_PATH = "/lighting"
        Incoming request: /lighting/devices/
        FastAPI receives: /devices/
    """

    def __init__(self, app, prefix: str):
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request, call_next):
        if self.prefix:
            path = request.url.path

            if path == self.prefix:
                return RedirectResponse(url=self.prefix + "/", status_code=307)

            if path.startswith(self.prefix + "/"):
                request.scope["path"] = path[len(self.prefix):] or "/"

        return await call_next(request)


# ============================================================
# CORS CONFIGURATION
# ============================================================

def _parse_origins(csv_value: str):
    """
    Parse comma-separated origins.

    Examples:
        "*" → (True, ["*"])
        "https://app.com,https://admin.app.com" → (False, [...])
        "" → (False, [])
    """
    if not csv_value:
        return (False, [])

    csv_value = csv_value.strip()

    if csv_value == "*":
        return (True, ["*"])

    origins = [origin.strip() for origin in csv_value.split(",") if origin.strip()]
    return (False, origins)


_http_allow_all, _http_origins = _parse_origins(
    os.getenv("HTTP_ALLOWED_ORIGINS", "*")
)
_ws_allow_all, _ws_origins = _parse_origins(
    os.getenv("WS_ALLOWED_ORIGINS", "*")
)


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup Sequence:
        1. Give the log WebSocket manager the running event loop
        2. Probe the database
        3. Create tables when DB_AUTO_CREATE is set (development)
        4. Seed missing system settings with configured defaults
    """
    loop = asyncio.get_running_loop()
    log_ws.log_ws_manager.set_main_loop(loop)

    if test_db_connection():
        print("[STARTUP] ✅ Database connection OK")
    else:
        print("[STARTUP] ❌ Database unreachable, write endpoints will answer 503")

    if settings.DB_AUTO_CREATE:
        create_all_tables()

    try:
        with SessionLocal() as db:
            seeded = settings_store.seed_defaults(db)
        if seeded:
            print(f"[STARTUP] 🌱 Seeded default settings: {', '.join(seeded)}")
    except CoreError as e:
        print(f"[STARTUP] ❌ Could not seed default settings: {e.message}")

    print("[STARTUP] ✅ Application initialization complete")

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")


# ============================================================
# APPLICATION INSTANCE CREATION
# ============================================================

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

# Middlewares run in reverse order of registration
if ROOT_PATH:
    app.add_middleware(StripPrefixMiddleware, prefix=ROOT_PATH)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    allow_credentials=not _http_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(CoreError)
async def core_error_handler(request: Request, exc: CoreError):
    if exc.http_status >= 500:
        log_ws.log_from_thread(f"[API] ❌ {request.method} {request.url.path}: {exc.message}", "error")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def persistence_error_handler(request: Request, exc: SQLAlchemyError):
    # Read paths run outside transaction(); their store failures land here
    log_ws.log_from_thread(f"[DB] ❌ {request.method} {request.url.path}: {exc}", "error")
    error = PersistenceFailure("Database unavailable: the request could not be completed")
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid request")
    body = Error_response(error=InvalidArgument.kind, message=message)
    return JSONResponse(status_code=InvalidArgument.http_status, content=body.model_dump())


# ============================================================
# HEALTH CHECK
# ============================================================

@app.get("/health")
def health():
    """
    Liveness/readiness probe for the load balancer.
    Answers 503 when the database does not respond.
    """
    if not test_db_connection():
        return JSONResponse(status_code=503, content={"status": "degraded", "database": "unreachable"})
    return {"status": "ok", "database": "ok"}


# ============================================================
# REST API ROUTE REGISTRATION
# ============================================================

app.include_router(devices.router, prefix="/devices", tags=["devices"])
app.include_router(sensors.router, prefix="/sensors", tags=["sensors"])
app.include_router(logs.router, prefix="/logs", tags=["logs"])
app.include_router(settings_routes.router, prefix="/settings", tags=["settings"])


# ============================================================
# WEBSOCKET ENDPOINTS
# ============================================================

async def socket_handler(ws: WebSocket, manager):
    """
    Validate the origin, register the socket, pump incoming messages to
    the manager and unregister on disconnect.
    """
    origin = ws.headers.get("origin")

    if (not _ws_allow_all) and (origin not in _ws_origins):
        print(f"[WS] ❌ Connection rejected - unauthorized origin: {origin}")
        await ws.close(code=1008)
        return

    await manager.register(ws)

    try:
        while True:
            message = await ws.receive_text()
            await manager.handle_message(ws, message)
    except Exception as e:
        print(f"[WS] Connection closed: {e}")
    finally:
        manager.unregister(ws)


@app.websocket("/logs/stream")
async def websocket_logs(ws: WebSocket):
    """
    Operational log and transition stream for the dashboard.

    Frontend Connection Example:
        const ws = new WebSocket('ws://localhost:8000/logs/stream');
        ws.onmessage = (event) => {
            const msg = JSON.parse(event.data);
            if (msg.msg_type === 'transition') refreshLamp(msg.device_id);
        };
    """
    await socket_handler(ws, log_ws.log_ws_manager)


# ============================================================
# API INFORMATION ENDPOINT
# ============================================================

@app.get("/api")
def api_info():
    return {
        "status": "online",
        "version": settings.PROJECT_VERSION,
        "architecture": "REST + WebSocket",
        "features": {
            "websockets": ["/logs/stream"],
            "device_stale_after_s": settings.DEVICE_STALE_AFTER_S,
            "log_page_max_limit": settings.LOG_PAGE_MAX_LIMIT,
        },
        "endpoints": {
            "devices": "/devices/*",
            "sensors": "/sensors/*",
            "logs": "/logs/*",
            "settings": "/settings/*",
            "log_stream": "/logs/stream (WebSocket)",
            "health": "/health"
        }
    }
