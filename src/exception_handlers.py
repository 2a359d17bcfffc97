from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.exceptions import DomainError
from src.logger_config import logger


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.exception(f'Domain error: {exc.message}')
    else:
        logger.error(f'Domain error on {request.method} {request.url.path}: {exc.message}')
    return JSONResponse(
        status_code=exc.status_code,
        content={'detail': exc.message, 'error': exc.kind},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        field = '.'.join(str(part) for part in error['loc'] if part != 'body')
        errors[field or 'body'] = error['msg']
    logger.error(f'Validation error on {request.method} {request.url.path}: {errors}')
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(
            {'detail': 'Validation failed', 'error': 'validation_error', 'errors': errors}
        ),
    )


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f'Unhandled exception: {str(exc)}')
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


EXCEPTION_HANDLERS = {
    DomainError: domain_error_handler,
    RequestValidationError: validation_error_handler,
    Exception: general_500_exception_handler,
}


def register_exception_handlers(app):
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
