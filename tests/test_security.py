# tests/test_security.py
"""
Testes das funções de segurança (tokens de API)
"""
import jwt
from datetime import datetime, timedelta

from app.utils.security import generate_api_token, verify_api_token


class TestApiToken:
    """Testes de token de API"""

    def test_generate_and_verify(self, app_context):
        token = generate_api_token('u1')
        assert isinstance(token, str)
        assert verify_api_token(token) == 'u1'

    def test_sender_id_as_text(self, app_context):
        assert verify_api_token(generate_api_token(42)) == '42'

    def test_expired_token(self, app_context):
        token = generate_api_token('u1', expires_in=-1)
        assert verify_api_token(token) is None

    def test_invalid_token(self, app_context):
        assert verify_api_token('invalid.token.here') is None

    def test_empty_token(self, app_context):
        assert verify_api_token('') is None
        assert verify_api_token(None) is None

    def test_wrong_secret(self, app_context):
        token = jwt.encode(
            {'sender_id': 'u1', 'purpose': 'api_access', 'exp': datetime.utcnow() + timedelta(hours=1)},
            'another-secret-key-with-at-least-32-bytes',
            algorithm='HS256'
        )
        assert verify_api_token(token) is None

    def test_wrong_purpose(self, app):
        with app.app_context():
            token = jwt.encode(
                {'sender_id': 'u1', 'purpose': 'email_confirm', 'exp': datetime.utcnow() + timedelta(hours=1)},
                app.config['SECRET_KEY'],
                algorithm='HS256'
            )
            assert verify_api_token(token) is None

    def test_missing_sender(self, app):
        with app.app_context():
            token = jwt.encode(
                {'purpose': 'api_access', 'exp': datetime.utcnow() + timedelta(hours=1)},
                app.config['SECRET_KEY'],
                algorithm='HS256'
            )
            assert verify_api_token(token) is None
