import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from booking import config
from booking.routers import appointments, providers, services
from booking.services.cleanup import AppointmentCleanupSweeper
from booking.services.schedule_store import schedule_store

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

cleanup_sweeper = AppointmentCleanupSweeper(
    store=schedule_store,
    interval_minutes=config.CLEANUP_INTERVAL_MINUTES,
    enabled=config.CLEANUP_ENABLED,
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    cleanup_sweeper.start()
    try:
        yield
    finally:
        cleanup_sweeper.shutdown()


app = FastAPI(title="Appointment Booking API", version="0.1.0", lifespan=lifespan)

cors_origins = config.parse_csv_env("CORS_ORIGINS", "*")
allow_any_origin = len(cors_origins) == 1 and cors_origins[0] == "*"

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # Browsers reject wildcard CORS with credentials enabled.
    allow_credentials=not allow_any_origin,
    allow_methods=["*"],
    allow_headers=["*"],
)

trusted_hosts = config.parse_csv_env("TRUSTED_HOSTS", "*")
if not (len(trusted_hosts) == 1 and trusted_hosts[0] == "*"):
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

app.include_router(providers.router, prefix="/providers")
app.include_router(services.router, prefix="/services")
app.include_router(appointments.router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/ready")
def ready():
    return {
        "status": "ready",
        "cleanup_enabled": cleanup_sweeper.enabled,
        "cleanup_running": cleanup_sweeper.is_running,
    }
