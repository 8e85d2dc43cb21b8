import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from .auth_routes import router as auth_router
from .db import check_db_connection, create_db_and_tables, engine, get_session
from .errors import register_exception_handlers
from .menu_routes import router as menu_router
from .orders_routes import router as orders_router
from .seeds.demo import seed_demo_data
from .settings import settings
from .staff_routes import router as staff_router
from .stats_routes import router as stats_router
from .tables_routes import router as tables_router
from .unit_of_work import UnitOfWork

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(title="Bistro POS API")

# CORS: comma-separated list of allowed origins
cors_origins_list = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(stats_router)
app.include_router(menu_router)
app.include_router(tables_router)
app.include_router(staff_router)
app.include_router(orders_router)


@app.on_event("startup")
def on_startup() -> None:
    logger.info("Starting application...")
    create_db_and_tables()
    with Session(engine) as session:
        # Create the order number counter before any concurrent order creation
        with UnitOfWork(session) as uow:
            uow.order_numbers.ensure_counter()
        if settings.seed_demo_data:
            seed_demo_data(session)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/health/db")
def health_db(session: Session = Depends(get_session)) -> dict:
    """Check database connection."""
    try:
        check_db_connection(session.get_bind())
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        raise HTTPException(status_code=503, detail=f"Database error: {e}")
    return {"status": "ok", "database": "connected"}
