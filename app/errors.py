"""
Erros do domínio de marca d'água e handlers JSON da API.

"Clean" (texto sem marca d'água) não é erro: é um resultado válido de
WatermarkService.check_text.
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class WatermarkError(Exception):
    """Erro base do sistema de marca d'água"""

    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class InvalidInput(WatermarkError):
    """Entrada inválida"""

    status_code = 400


class NotFound(WatermarkError):
    """Marca d'água não encontrada"""

    status_code = 404


class RegistryExhausted(WatermarkError):
    """Não foi possível gerar um código único"""

    status_code = 503


class StoreUnavailable(WatermarkError):
    """Banco de dados indisponível"""

    status_code = 503


class Unauthorized(WatermarkError):
    """Autenticação necessária"""

    status_code = 401


def error_response(message, status_code):
    return jsonify({'success': False, 'error': {'message': message}}), status_code


def register_error_handlers(app):
    """Registra handlers que devolvem erros no envelope JSON da API"""

    @app.errorhandler(WatermarkError)
    def handle_watermark_error(error):
        if error.status_code >= 500:
            logger.error(f"{error.__class__.__name__}: {error.message}")
        return error_response(error.message, error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return error_response(error.description, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Erro inesperado: {error}")
        return error_response('Internal server error', 500)
