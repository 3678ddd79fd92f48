import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred."


def custom_exception_handler(exc, context):
    """
    Handler de exceção do DRF.

    Erros de cliente são logados como warning; erros de servidor e exceções
    não tratadas como error, sem expor detalhes internos na resposta.
    """
    request = context["request"]

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(detail=exc.messages)

    response = exception_handler(exc, context)

    if response is None:
        logger.exception("api_unhandled_exception", method=request.method, path=request.path, exc=str(exc))
        return Response({"detail": INTERNAL_ERROR_MESSAGE}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if response.status_code < 500:
        logger.warning(
            "api_client_error",
            status_code=response.status_code,
            method=request.method,
            path=request.path,
            details=response.data,
        )
    else:
        logger.error(
            "api_server_error",
            status_code=response.status_code,
            method=request.method,
            path=request.path,
            exc=str(exc),
        )
        response.data = {"detail": INTERNAL_ERROR_MESSAGE}

    return response
