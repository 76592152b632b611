# app/services/watermark_service.py
"""
Serviço de marca d'água: liga o registro de códigos ao codec invisível

- embed_for_send: emite um código e embute no texto que será enviado
- check_text: procura um código em um texto suspeito e registra a detecção
- stats / history: visão agregada e histórico paginado
"""
import logging
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from app.errors import InvalidInput, NotFound
from app.models import MessageWatermark
from app.services.watermark_registry import WatermarkRegistry
from app.utils import watermark as codec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbedResult:
    watermarked_text: str
    code: str
    record: MessageWatermark


@dataclass(frozen=True)
class CheckResult:
    """found=False é o resultado "limpo": nada a atribuir"""

    found: bool
    record: Optional[MessageWatermark] = None


CLEAN = CheckResult(found=False)


class WatermarkService:
    """Coordena registro e codec"""

    def __init__(self, registry=None):
        self.registry = registry or WatermarkRegistry()

    def embed_for_send(self, text, sender_id, platform=None, recipient_id=None):
        """
        Emite um código para o envio e embute no texto

        Args:
            text: texto original da mensagem
            sender_id: conta que envia
            platform: canal (opcional, usa WATERMARK_DEFAULT_PLATFORM)
            recipient_id: destinatário (opcional)

        Returns:
            EmbedResult com o texto marcado e o código
        """
        if not isinstance(text, str) or not text:
            raise InvalidInput('text is required')
        if not sender_id:
            raise InvalidInput('sender_id is required')
        if platform is None:
            platform = current_app.config.get('WATERMARK_DEFAULT_PLATFORM', 'whatsapp')
        if not isinstance(platform, str) or not platform:
            raise InvalidInput('platform must be a non-empty string')
        # O registro é imutável: tipo errado aqui ficaria gravado para sempre
        if recipient_id is not None and not isinstance(recipient_id, str):
            raise InvalidInput('recipient_id must be a string')

        preview_chars = current_app.config.get('WATERMARK_PREVIEW_CHARS', 200)
        preview = codec.strip_watermarks(text)[:preview_chars]

        record = self.registry.issue(
            sender_id=sender_id,
            platform=platform,
            message_preview=preview,
            recipient_id=recipient_id,
        )
        watermarked = codec.embed(text, record.code)
        return EmbedResult(watermarked_text=watermarked, code=record.code, record=record)

    def check_text(self, text):
        """
        Verifica se um texto carrega uma marca d'água conhecida

        Checksum inválido e código desconhecido no registro viram CLEAN;
        só um código encontrado no registro conta como detecção.
        """
        if not text:
            return CLEAN

        code = codec.extract(text)
        if code is None:
            return CLEAN

        try:
            record = self.registry.record_detection(code)
        except NotFound:
            logger.info(f"Código {code} decodificado mas ausente do registro")
            return CLEAN

        return CheckResult(found=True, record=record)

    def stats(self, sender_id=None, recent_limit=10):
        """
        Visão agregada das marcas d'água

        protection_rate: % de marcas nunca detectadas (100.0 sem marcas)
        """
        total, detected = self.registry.totals(sender_id=sender_id)
        if total > 0:
            protection_rate = round((total - detected) / total * 100, 2)
        else:
            protection_rate = 100.0

        return {
            'total_watermarks': total,
            'detected_forwards': detected,
            'protection_rate': protection_rate,
            'recent_detections': self.registry.recent_detections(
                limit=recent_limit, sender_id=sender_id
            ),
        }

    def history(self, page=1, page_size=None, only_detected=False, sender_id=None):
        if page_size is None:
            page_size = current_app.config.get('WATERMARK_DEFAULT_PAGE_SIZE', 20)
        return self.registry.list(
            page=page,
            page_size=page_size,
            only_detected=only_detected,
            sender_id=sender_id,
        )

    def lookup(self, code):
        return self.registry.lookup(code)

    def purge(self, code):
        self.registry.purge(code)


watermark_service = WatermarkService()
