import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from showcase.auth.jwt_handler import TokenService
from showcase.core import config
from showcase.database import build_engine, build_session_factory, create_schema, get_db
from showcase.routes import admin_routes, auth_routes, project_routes

logger = logging.getLogger(__name__)


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        message = error.get('msg', 'Invalid value')
        # Drop pydantic's "Value error, " prefix from field_validator failures.
        if message.startswith('Value error, '):
            message = message[len('Value error, '):]
        location = '.'.join(str(part) for part in error.get('loc', ()) if part != 'body')
        messages.append(f'{location}: {message}' if location else message)
    return messages


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': 'Validation error', 'errors': _validation_messages(exc)},
    )


def create_app(database_url: str | None = None, token_service: TokenService | None = None) -> FastAPI:
    config.validate_runtime_config()
    logging.getLogger('showcase').setLevel(config.LOG_LEVEL)

    engine = build_engine(database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            create_schema(engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL.')
        yield
        engine.dispose()

    app = FastAPI(title='Student Showcase API', lifespan=lifespan)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_service = token_service or TokenService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization'],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get('/')
    def root():
        return {
            'message': 'Student Showcase API is running',
            'status': 'healthy',
            'environment': config.APP_ENV,
        }

    @app.get('/health/db')
    def database_health(db: Session = Depends(get_db)):
        try:
            db.execute(text('SELECT 1'))
        except SQLAlchemyError:
            logger.exception('Database health check failed')
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={'status': 'unavailable'},
            )
        return {'status': 'connected'}

    app.include_router(auth_routes.router, prefix='/auth')
    app.include_router(project_routes.router, prefix='/projects')
    app.include_router(admin_routes.router, prefix='/admin')

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run('showcase.main:app', host='0.0.0.0', port=config.PORT)


if __name__ == '__main__':
    main()
