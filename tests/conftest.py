# tests/conftest.py
"""
Fixtures compartilhados para todos os testes do msgtrace
"""
import os
import pytest

# Forçar variáveis de ambiente ANTES de importar a app
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
TEST_SECRET_KEY = 'test-secret-key-for-testing-0123456789abcdef'
os.environ['SECRET_KEY'] = TEST_SECRET_KEY
os.environ['ADMIN_API_KEYS'] = 'test-admin-key'

from app import create_app, db as _db
from app.services.watermark_registry import WatermarkRegistry
from app.services.watermark_service import WatermarkService
from app.utils.security import generate_api_token

ADMIN_KEY = 'test-admin-key'


@pytest.fixture(scope='function')
def app():
    """Cria a aplicação Flask para testes"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SECRET_KEY': TEST_SECRET_KEY,
        'ADMIN_API_KEYS': [ADMIN_KEY],
    })
    return app


@pytest.fixture(scope='function')
def db(app):
    """Cria e limpa o banco de dados para cada teste"""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app, db):
    """Cliente de teste HTTP"""
    with app.test_client() as client:
        with app.app_context():
            yield client


@pytest.fixture
def app_context(app, db):
    """Contexto da aplicação"""
    with app.app_context():
        yield app


@pytest.fixture
def file_app(tmp_path):
    """App com SQLite em arquivo, para testes com várias threads/conexões"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'msgtrace-test.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30}},
        'SECRET_KEY': TEST_SECRET_KEY,
    })
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.drop_all()
        _db.engine.dispose()


@pytest.fixture
def registry(app_context):
    return WatermarkRegistry()


@pytest.fixture
def service(app_context):
    return WatermarkService()


@pytest.fixture
def sender_token(app, db):
    """Token de API do remetente u1 (contexto próprio, não fica empilhado)"""
    with app.app_context():
        return generate_api_token('u1')


@pytest.fixture
def auth_headers(sender_token):
    return bearer(sender_token)


def bearer(token):
    """Helper para montar o header Authorization"""
    return {'Authorization': f'Bearer {token}'}


def sequence_codes(*codes):
    """Gerador de códigos determinístico (para simular colisões)"""
    iterator = iter(codes)
    return lambda: next(iterator)
