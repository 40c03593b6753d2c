"""Application error definitions and FastAPI handlers."""

from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError


class AppException(Exception):
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, code: str = "error"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NotFoundException(AppException):
    def __init__(self, message: str = "Registro não encontrado"):
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND, code="not_found")


class ValidationAppException(AppException):
    def __init__(self, message: str = "Dados inválidos"):
        super().__init__(message=message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, code="validation_error")


class MissingBOMException(AppException):
    """Raised when a product without a bill of materials is costed."""

    def __init__(self, message: str = "Produto sem ficha técnica (BOM) para cálculo de custos"):
        super().__init__(message=message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, code="missing_bom")


class DegenerateInputException(AppException):
    """Raised when a formula would divide by a caller-supplied zero."""

    def __init__(self, message: str = "Preço de venda zero: margem percentual indefinida"):
        super().__init__(message=message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, code="degenerate_input")


class InsufficientStockException(AppException):
    def __init__(self, materials: Optional[List[str]] = None, message: str = "Estoque insuficiente"):
        self.materials = list(materials or [])
        if self.materials:
            message = f"{message}: {', '.join(self.materials)}"
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT, code="insufficient_stock")


def _format_error(detail: str, code: str, **extra):
    payload = {"mensagem": detail, "codigo": code}
    payload.update(extra)
    return payload


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InsufficientStockException)
    async def insufficient_stock_handler(request: Request, exc: InsufficientStockException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_format_error(exc.message, exc.code, materiais=exc.materials),
        )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=_format_error(exc.message, exc.code))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_format_error("Os dados enviados não puderam ser validados", "validation_error"),
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_format_error("Os dados enviados não puderam ser validados", "validation_error"),
        )
