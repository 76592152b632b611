import os
from dotenv import load_dotenv

load_dotenv()

# Diretório base do projeto
basedir = os.path.abspath(os.path.dirname(__file__))


def _int_env(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'

    # Database - Usar caminho absoluto
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(basedir, 'instance', 'msgtrace.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Autenticação da API
    API_TOKEN_EXPIRES_IN = _int_env('API_TOKEN_EXPIRES_IN', 2592000)  # 30 dias
    ADMIN_API_KEYS = [k.strip() for k in os.environ.get('ADMIN_API_KEYS', '').split(',') if k.strip()]

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Marca d'água
    WATERMARK_MAX_ISSUE_ATTEMPTS = _int_env('WATERMARK_MAX_ISSUE_ATTEMPTS', 5)
    WATERMARK_PREVIEW_CHARS = _int_env('WATERMARK_PREVIEW_CHARS', 200)
    WATERMARK_DEFAULT_PLATFORM = os.environ.get('WATERMARK_DEFAULT_PLATFORM', 'whatsapp')
    WATERMARK_DEFAULT_PAGE_SIZE = _int_env('WATERMARK_DEFAULT_PAGE_SIZE', 20)
    WATERMARK_MAX_PAGE_SIZE = _int_env('WATERMARK_MAX_PAGE_SIZE', 100)
