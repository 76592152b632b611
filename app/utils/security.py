import secrets
from datetime import datetime, timedelta
from functools import wraps
from typing import Optional

import jwt
from flask import current_app, g, request

from app.errors import Unauthorized


def generate_api_token(sender_id: str, expires_in: Optional[int] = None) -> str:
    """
    Gerar token JWT de acesso à API

    Args:
        sender_id: ID da conta (remetente) dona do token
        expires_in: Tempo de expiração em segundos (padrão: API_TOKEN_EXPIRES_IN)

    Returns:
        Token JWT
    """
    if expires_in is None:
        expires_in = current_app.config.get('API_TOKEN_EXPIRES_IN', 2592000)

    payload = {
        'sender_id': str(sender_id),
        'exp': datetime.utcnow() + timedelta(seconds=expires_in),
        'iat': datetime.utcnow(),
        'purpose': 'api_access'
    }

    return jwt.encode(
        payload,
        current_app.config['SECRET_KEY'],
        algorithm='HS256'
    )


def verify_api_token(token: str) -> Optional[str]:
    """
    Verificar token de API

    Returns:
        sender_id se válido, None se inválido/expirado
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            current_app.config['SECRET_KEY'],
            algorithms=['HS256']
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    # Verificar se é token de API
    if payload.get('purpose') != 'api_access':
        return None

    return payload.get('sender_id') or None


def token_required(f):
    """
    Decorator para exigir Bearer token válido. O remetente fica em g.sender_id
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        header = request.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token:
            raise Unauthorized('Authentication required')

        sender_id = verify_api_token(token.strip())
        if sender_id is None:
            raise Unauthorized('Invalid or expired token')

        g.sender_id = sender_id
        return f(*args, **kwargs)
    return decorated_function


def require_api_key(f):
    """
    Decorator para exigir API key administrativa (X-API-Key)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        api_key = request.headers.get('X-API-Key')

        if not api_key:
            raise Unauthorized('API key required')

        valid_keys = current_app.config.get('ADMIN_API_KEYS') or []
        if not any(secrets.compare_digest(api_key.encode('utf-8'), key.encode('utf-8')) for key in valid_keys):
            raise Unauthorized('Invalid API key')

        return f(*args, **kwargs)
    return decorated_function
