import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from emargement.core import config
from emargement.core.errors import ServiceError
from emargement.database import Base, engine, ensure_attendance_schema
from emargement.models import attendance, training_session, user  # noqa: F401
from emargement.routes import auth_routes, session_routes

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(debug=config.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_attendance_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={'error': exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception('Database error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={'error': 'Internal server error'})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unexpected error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={'error': 'Internal server error'})


@app.get('/')
def root():
    return {'status': 'Emargement API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(session_routes.router, prefix='/sessions')
