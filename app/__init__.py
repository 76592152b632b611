# app/__init__.py
import logging
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS

db = SQLAlchemy()
migrate = Migrate()


def configure_logging(app):
    """Configura o logging da aplicação (formato único para todos os módulos)"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=level
    )
    logging.getLogger('app').setLevel(level)


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object('config.Config')
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # Garantir que o diretório do SQLite existe
    uri = app.config['SQLALCHEMY_DATABASE_URI']
    if uri.startswith('sqlite:///') and ':memory:' not in uri:
        db_dir = os.path.dirname(uri.replace('sqlite:///', '', 1))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    # Inicializar extensões
    db.init_app(app)
    migrate.init_app(app, db)
    CORS(app)

    # Importar modelos para registrar as tabelas
    from app import models  # noqa: F401

    # Registrar blueprints
    from app.routes import health, watermarks
    app.register_blueprint(health.bp)
    app.register_blueprint(watermarks.bp)

    from app.errors import register_error_handlers
    register_error_handlers(app)

    from app.cli import register_commands
    register_commands(app)

    return app
