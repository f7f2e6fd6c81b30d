# app/main.py
from contextlib import asynccontextmanager
from datetime import timedelta
import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient

from app.core.clock import Clock, SystemClock
from app.core.config import settings
from app.core.logging_middleware import LoggingMiddleware
from app.database.assignment_repo import AssignmentRepo
from app.database.mongo_assignment import MongoAssignmentRepository
from app.services.list_cache import AssignmentListCache
from app.services.publisher_service import LogNotificationSink, NotificationSink, ReminderPublisher
from app.services.reminders import ReminderDispatcher
from app.routers.v1 import health
from app.routers.v1 import assignment
from app.routers.v1 import notifications

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    stream=sys.stdout,
)

logging.getLogger("pymongo").setLevel(logging.WARNING)
logging.getLogger("aio_pika").setLevel(logging.WARNING)
logging.getLogger("aiormq").setLevel(logging.WARNING)


def install_services(
    app: FastAPI,
    repo: AssignmentRepo,
    notifier: NotificationSink,
    clock: Clock,
    window: timedelta = timedelta(hours=24),
) -> ReminderDispatcher:
    """Collega repo, cache, sink e dispatcher sull'app.state."""
    cache = AssignmentListCache()
    dispatcher = ReminderDispatcher(repo, cache, notifier, clock, window)
    # ogni mutazione riuscita rilancia il controllo delle scadenze
    cache.subscribe(dispatcher.on_collection_changed)

    app.state.assignment_repo = repo
    app.state.assignment_cache = cache
    app.state.notifier = notifier
    app.state.clock = clock
    app.state.reminder_dispatcher = dispatcher
    return dispatcher


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = AsyncIOMotorClient(settings.mongo_uri, uuidRepresentation="standard", tz_aware=True)
        db = client[settings.mongo_db_name]
        repo = MongoAssignmentRepository(db)
        await repo.ensure_indexes()

        # --- Notification sink ---
        if settings.rabbitmq_url:
            notifier = ReminderPublisher(
                rabbitmq_url=settings.rabbitmq_url,
                exchange=settings.notifications_exchange,
                routing_key=settings.notifications_routing_key,
                heartbeat=30,
                enabled=settings.notifications_enabled,
            )
            await notifier.connect(max_retries=10, delay=5)
        else:
            logging.info("RabbitMQ non configurato, reminder solo nei log")
            notifier = LogNotificationSink(enabled=settings.notifications_enabled)

        install_services(
            app,
            repo=repo,
            notifier=notifier,
            clock=SystemClock.from_name(settings.timezone),
            window=timedelta(hours=settings.reminder_window_hours),
        )

        try:
            yield
        finally:
            await notifier.close()
            client.close()

    app = FastAPI(
        title=settings.project_name,
        description="Assignment tracker con reminder delle scadenze",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )

    app.include_router(health.router,        prefix="/api/v1", tags=["health"])
    app.include_router(assignment.router,    prefix="/api/v1", tags=["assignments"])
    app.include_router(notifications.router, prefix="/api/v1", tags=["notifications"])
    return app

app = create_app()
