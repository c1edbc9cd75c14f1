"""FastAPI integration for validating request bodies.

Usage:
    app = FastAPI()
    install_validation_handler(app)

    @app.post("/signup")
    async def signup(form: SignUp = Depends(validate_request(SignUp))):
        ...

A body that fails validation is answered with 422 and
``{"status": false, "errors": {...}}``.
"""

from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from validata.schema import record_from_dict
from validata.types import ValidationResult
from validata.validator import Validator, default_validator


class ValidationFailure(BaseModel):
    """Response body for a rejected request."""

    status: bool = False
    errors: dict[str, Any]


class RecordValidationFailed(Exception):
    """Raised by the request dependency when a record fails validation."""

    def __init__(self, errors: ValidationResult):
        self.errors = errors
        super().__init__(f"{len(errors)} field(s) checked, validation failed")


def request_locale(request: Request) -> str | None:
    """Pick the locale from the ``locale`` query parameter or Accept-Language.

    Only the first language range of the header is used.
    """
    locale = request.query_params.get("locale")
    if locale:
        return locale

    header = request.headers.get("accept-language")
    if not header:
        return None
    for language_range in header.split(","):
        tag = language_range.split(";", 1)[0].strip()
        if tag and tag != "*":
            return tag
    return None


def validate_request(
    record_type: type,
    validator: Validator | None = None,
) -> Callable[[Request], Any]:
    """Create a dependency that builds and validates a record from the body.

    Args:
        record_type: Record dataclass declared with ``rule_field``
        validator: Validator to use (the default validator if omitted)

    Returns:
        A FastAPI dependency returning the validated record

    Raises:
        HTTPException 400 if the body is not a JSON object
        RecordValidationFailed if any field fails
    """

    async def dependency(request: Request) -> Any:
        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(400, "Request body must be a JSON object")
        if not isinstance(payload, dict):
            raise HTTPException(400, "Request body must be a JSON object")

        record = record_from_dict(record_type, payload)
        errors = await (validator or default_validator()).validate(record, request_locale(request))
        if errors is not None:
            raise RecordValidationFailed(errors)
        return record

    return dependency


async def _validation_failed_handler(request: Request, exc: RecordValidationFailed) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=ValidationFailure(errors=exc.errors).model_dump(),
    )


def install_validation_handler(app: FastAPI) -> None:
    """Register the 422 response for ``RecordValidationFailed``."""
    app.add_exception_handler(RecordValidationFailed, _validation_failed_handler)
