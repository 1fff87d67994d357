import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from office_hours.auth.dependencies import get_portal_service
from office_hours.core import config
from office_hours.core.errors import PortalError
from office_hours.database import init_db
from office_hours.routes import admin_routes, auth_routes, portal_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='Office Hours API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return

    if not config.BOOTSTRAP_ADMIN_EMAIL:
        return
    try:
        admin = get_portal_service().bootstrap_admin(
            config.BOOTSTRAP_ADMIN_EMAIL,
            config.BOOTSTRAP_ADMIN_PASSWORD,
            config.BOOTSTRAP_ADMIN_NAME,
        )
    except (PortalError, SQLAlchemyError):
        logger.exception('Could not create the bootstrap administrator %s', config.BOOTSTRAP_ADMIN_EMAIL)
        return
    if admin is not None:
        logger.info('Bootstrap administrator created: %s', admin.id)


@app.get('/')
def root():
    return {'status': 'Office Hours API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(admin_routes.router, prefix='/admin')
app.include_router(portal_routes.router, prefix='/portal')
