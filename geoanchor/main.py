"""
geoanchor/main.py
============================================
FastAPI Application for Wallet Geo-Anchoring
============================================

Entry point of the anchoring service. Wallet clients report locations over
REST and receive the anchor events (cell transitions, rule triggers,
checkpoints) each report produced, ready for on-chain anchoring.

Architecture Overview:
---------------------
- REST API: POST /locations/update plus read-only anchor state queries
- WebSocket: Real-time system logs streamed via /logs endpoint
- Anchoring core: stateless per request; all state lives in the database
"""

# Environment Configuration
from dotenv import load_dotenv
import os
load_dotenv()

# FastAPI Core
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import asyncio

from geoanchor.Core.config import settings
from geoanchor.Core import log_ws
from geoanchor.Controller.Routes import anchors, locations
from geoanchor.DB.database import check_db_connection
from geoanchor.Middleware.deployment import (
    InstanceHeaderMiddleware,
    StripPrefixMiddleware,
    normalize_root_path,
    parse_origins,
)


ROOT_PATH = normalize_root_path(os.getenv("ROOT_PATH", ""))
_http_allow_all, _http_origins = parse_origins(os.getenv("HTTP_ALLOWED_ORIGINS", "*"))
_ws_allow_all, _ws_origins = parse_origins(os.getenv("WS_ALLOWED_ORIGINS", "*"))


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Sync endpoints log from the threadpool; broadcasts need the main loop
    log_ws.log_ws_manager.set_main_loop(asyncio.get_running_loop())

    print(
        f"[STARTUP] Anchoring: grid {settings.ANCHOR_GRID_PRECISION_DEG}°, "
        f"dedup window {settings.ANCHOR_DEDUP_WINDOW_S}s, "
        f"checkpoint every {settings.ANCHOR_CHECKPOINT_INTERVAL_S}s"
    )
    print("[STARTUP] ✅ Application initialization complete")

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)


# ============================================================
# MIDDLEWARE REGISTRATION (last registered runs first)
# ============================================================
if ROOT_PATH:
    app.add_middleware(StripPrefixMiddleware, prefix=ROOT_PATH)

app.add_middleware(InstanceHeaderMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ROUTES
# ============================================================
app.include_router(locations.router, prefix="/locations", tags=["locations"])
app.include_router(anchors.router, prefix="/anchors", tags=["anchors"])


@app.get("/health")
def health():
    """
    Liveness probe for the load balancer.

    The anchoring core degrades when the database is down, so "degraded"
    still answers 200: location updates keep returning cell ids.
    """
    database_ok = check_db_connection()
    return {
        "status": "ok" if database_ok else "degraded",
        "database": "connected" if database_ok else "disconnected"
    }


@app.get("/api")
def api_info():
    """API discovery: version, anchoring parameters and available endpoints."""
    return {
        "status": "online",
        "version": settings.PROJECT_VERSION,
        "architecture": "REST + WebSocket logs",
        "anchoring": {
            "grid_precision_deg": settings.ANCHOR_GRID_PRECISION_DEG,
            "dedup_window_s": settings.ANCHOR_DEDUP_WINDOW_S,
            "checkpoint_interval_s": settings.ANCHOR_CHECKPOINT_INTERVAL_S,
            "event_types": ["CELL_TRANSITION", "RULE_TRIGGERED", "CHECKPOINT"]
        },
        "features": {
            "websockets": ["/logs"],
            "instance_tracking": bool(os.getenv("INSTANCE_ID"))
        },
        "endpoints": {
            "locations": "/locations/update",
            "anchors": "/anchors/*",
            "logs": "/logs (WebSocket)",
            "health": "/health"
        }
    }


# ============================================================
# WEBSOCKET ENDPOINTS
# ============================================================
@app.websocket("/logs")
async def websocket_logs(ws: WebSocket):
    """
    Real-time system logs: anchor decisions, degraded collaborators, write errors.

    Message Format:
        {"msg_type": "log" | "warning" | "error", "message": "..."}
    """
    origin = ws.headers.get("origin")
    if not _ws_allow_all and origin not in _ws_origins:
        print(f"[WS] ❌ Connection rejected - unauthorized origin: {origin}")
        await ws.close(code=403)
        return

    manager = log_ws.log_ws_manager
    await manager.register(ws)
    try:
        while True:
            await manager.handle_message(ws, await ws.receive_text())
    except Exception as e:
        print(f"[WS] Connection closed: {e}")
    finally:
        manager.unregister(ws)
