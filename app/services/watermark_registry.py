# app/services/watermark_registry.py
"""
Registro de códigos de marca d'água.

Gera códigos únicos, persiste os metadados de cada envio e mantém os
contadores de detecção. A unicidade vem das constraints do banco (não de
lock em memória), e o contador é incrementado por um único UPDATE atômico,
então várias instâncias do serviço podem rodar ao mesmo tempo.
"""
import logging
import secrets
from contextlib import contextmanager
from datetime import datetime

from flask import current_app
from sqlalchemy import func, select, update
from sqlalchemy.exc import (
    DisconnectionError, IntegrityError, InterfaceError, OperationalError,
    TimeoutError as PoolTimeoutError,
)

from app import db
from app.errors import InvalidInput, NotFound, RegistryExhausted, StoreUnavailable
from app.models import IssuedCode, MessageWatermark
from app.utils.watermark import CODE_ALPHABET, CODE_LENGTH

logger = logging.getLogger(__name__)

# Falhas de conexão/timeout; IntegrityError fica de fora (é tratado no retry)
STORE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


def generate_code():
    """Código aleatório com fonte criptográfica (10 chars, base32 Crockford)"""
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


@contextmanager
def store_errors(operation):
    """Converte falhas do banco em StoreUnavailable (com rollback)"""
    try:
        yield
    except STORE_ERRORS as e:
        db.session.rollback()
        logger.warning(f"Banco indisponível em {operation}: {e}")
        raise StoreUnavailable(f"Store unavailable during {operation}") from e


class WatermarkRegistry:
    """Emissão e consulta de registros de marca d'água"""

    def __init__(self, code_generator=None, max_attempts=None):
        self._generate_code = code_generator or generate_code
        self._max_attempts = max_attempts

    @property
    def max_attempts(self):
        if self._max_attempts is not None:
            return self._max_attempts
        return current_app.config.get('WATERMARK_MAX_ISSUE_ATTEMPTS', 5)

    def issue(self, sender_id, platform, message_preview=None, recipient_id=None):
        """
        Gera um código novo e persiste o registro

        Colisão de código é recuperável: tenta de novo até max_attempts vezes
        e então levanta RegistryExhausted.

        Returns:
            MessageWatermark: registro criado (detected_count = 0)
        """
        if not sender_id:
            raise InvalidInput('sender_id is required')
        if not platform:
            raise InvalidInput('platform is required')

        for attempt in range(1, self.max_attempts + 1):
            code = self._generate_code()
            record = MessageWatermark(
                code=code,
                sender_id=str(sender_id),
                recipient_id=str(recipient_id) if recipient_id is not None else None,
                platform=platform,
                message_preview=message_preview,
                detected_count=0,
            )
            # O código fica reservado para sempre, mesmo após purge do registro
            issued = IssuedCode(code=code)
            db.session.add(issued)
            db.session.add(record)

            with store_errors('issue'):
                try:
                    db.session.commit()
                except IntegrityError:
                    db.session.rollback()
                    # Só é colisão se o código já estiver reservado; outra constraint propaga
                    if not self._code_taken(code):
                        raise
                    logger.warning(f"Colisão de código na tentativa {attempt}/{self.max_attempts}")
                    continue
                db.session.expunge(issued)
                db.session.refresh(record)

            logger.info(f"Marca d'água {code} emitida para {record.sender_id} ({platform})")
            return record

        logger.error(f"Registro esgotado após {self.max_attempts} tentativas de gerar código único")
        raise RegistryExhausted(
            f"Could not generate a unique watermark code after {self.max_attempts} attempts"
        )

    def _code_taken(self, code):
        return db.session.execute(
            select(IssuedCode.code).where(IssuedCode.code == code)
        ).first() is not None

    def lookup(self, code):
        """Leitura pura por código"""
        with store_errors('lookup'):
            record = db.session.execute(
                select(MessageWatermark).where(MessageWatermark.code == code)
            ).scalar_one_or_none()
        if record is None:
            raise NotFound(f"Watermark {code} not found")
        return record

    def record_detection(self, code):
        """
        Incrementa detected_count e atualiza last_detected_at

        Um único UPDATE condicional no banco; nunca ler-modificar-escrever
        em Python, para não perder incrementos concorrentes.
        """
        now = datetime.utcnow()
        with store_errors('record_detection'):
            result = db.session.execute(
                update(MessageWatermark)
                .where(MessageWatermark.code == code)
                .values(
                    detected_count=MessageWatermark.detected_count + 1,
                    last_detected_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                db.session.rollback()
                raise NotFound(f"Watermark {code} not found")

            # Lido na mesma transação: reflete exatamente este incremento.
            # expunge evita que o commit expire (e recarregue) os valores.
            record = db.session.execute(
                select(MessageWatermark)
                .where(MessageWatermark.code == code)
                .execution_options(populate_existing=True)
            ).scalar_one()
            db.session.expunge(record)
            db.session.commit()

        logger.info(f"Marca d'água {code} detectada ({record.detected_count}x)")
        return record

    def list(self, page=1, page_size=20, only_detected=False, sender_id=None):
        """
        Lista paginada, mais recentes primeiro

        Returns:
            tuple: (registros, total)
        """
        max_page_size = current_app.config.get('WATERMARK_MAX_PAGE_SIZE', 100)
        if page < 1:
            raise InvalidInput('page must be >= 1')
        if page_size < 1 or page_size > max_page_size:
            raise InvalidInput(f'page_size must be between 1 and {max_page_size}')

        filters = []
        if sender_id is not None:
            filters.append(MessageWatermark.sender_id == str(sender_id))
        if only_detected:
            filters.append(MessageWatermark.detected_count > 0)

        with store_errors('list'):
            total = db.session.execute(
                select(func.count()).select_from(MessageWatermark).where(*filters)
            ).scalar_one()
            records = db.session.execute(
                select(MessageWatermark)
                .where(*filters)
                .order_by(MessageWatermark.created_at.desc(), MessageWatermark.id.desc())
                .limit(page_size)
                .offset((page - 1) * page_size)
            ).scalars().all()

        return records, total

    def totals(self, sender_id=None):
        """Retorna (total de marcas, marcas detectadas ao menos uma vez)"""
        filters = []
        if sender_id is not None:
            filters.append(MessageWatermark.sender_id == str(sender_id))

        with store_errors('totals'):
            total = db.session.execute(
                select(func.count()).select_from(MessageWatermark).where(*filters)
            ).scalar_one()
            detected = db.session.execute(
                select(func.count()).select_from(MessageWatermark)
                .where(MessageWatermark.detected_count > 0, *filters)
            ).scalar_one()
        return total, detected

    def recent_detections(self, limit=10, sender_id=None):
        filters = [MessageWatermark.detected_count > 0]
        if sender_id is not None:
            filters.append(MessageWatermark.sender_id == str(sender_id))

        with store_errors('recent_detections'):
            return db.session.execute(
                select(MessageWatermark)
                .where(*filters)
                .order_by(MessageWatermark.last_detected_at.desc(), MessageWatermark.id.desc())
                .limit(limit)
            ).scalars().all()

    def purge(self, code):
        """Remove o registro (uso administrativo). O código continua reservado."""
        with store_errors('purge'):
            record = db.session.execute(
                select(MessageWatermark).where(MessageWatermark.code == code)
            ).scalar_one_or_none()
            if record is None:
                raise NotFound(f"Watermark {code} not found")
            db.session.delete(record)
            db.session.commit()
        logger.info(f"Marca d'água {code} removida")
