# app/routes/watermarks.py
import logging
import math

from flask import Blueprint, current_app, g, jsonify, request

from app.errors import InvalidInput, NotFound
from app.services.watermark_service import watermark_service
from app.utils.security import require_api_key, token_required

bp = Blueprint('watermarks', __name__, url_prefix='/api/watermarks')
logger = logging.getLogger(__name__)


def success_response(data, message='Success', status_code=200):
    return jsonify({'success': True, 'message': message, 'data': data}), status_code


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput('JSON body is required')
    return data


@bp.route('', methods=['GET'])
@token_required
def list_watermarks():
    """Histórico de marcas d'água do remetente autenticado"""
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config['WATERMARK_DEFAULT_PAGE_SIZE'], type=int)
    only_detected = request.args.get('onlyDetected', 'false').lower() == 'true'

    records, total = watermark_service.history(
        page=page,
        page_size=limit,
        only_detected=only_detected,
        sender_id=g.sender_id,
    )

    return jsonify({
        'success': True,
        'message': 'Success',
        'data': [record.to_dict() for record in records],
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'totalPages': math.ceil(total / limit),
        },
    })


@bp.route('/stats', methods=['GET'])
@token_required
def stats():
    result = watermark_service.stats(sender_id=g.sender_id)
    return success_response({
        'totalWatermarks': result['total_watermarks'],
        'detectedForwards': result['detected_forwards'],
        'protectionRate': result['protection_rate'],
        'recentDetections': [r.to_dict() for r in result['recent_detections']],
    })


@bp.route('/check', methods=['POST'])
@token_required
def check():
    """Verifica se um texto (ex: mensagem encaminhada) tem marca d'água"""
    text = _json_body().get('text')
    if not isinstance(text, str):
        raise InvalidInput('text is required')

    result = watermark_service.check_text(text)
    if not result.found:
        return success_response({
            'found': False,
            'message': 'No watermark detected in this text',
        })

    logger.info(f"Vazamento detectado: código {result.record.code} verificado por {g.sender_id}")
    return success_response({
        'found': True,
        'watermark': result.record.to_dict(),
    })


@bp.route('/embed', methods=['POST'])
@token_required
def embed():
    """Embute marca d'água em um texto antes do envio"""
    data = _json_body()
    text = data.get('text')
    if not isinstance(text, str) or not text:
        raise InvalidInput('text is required')

    result = watermark_service.embed_for_send(
        text=text,
        sender_id=g.sender_id,
        platform=data.get('platform'),
        recipient_id=data.get('recipientId'),
    )

    return success_response({
        'original': text,
        'watermarked': result.watermarked_text,
        'watermarkCode': result.code,
        'watermark': result.record.to_dict(),
    }, 'Watermark embedded successfully', 201)


@bp.route('/<code>', methods=['GET'])
@token_required
def get_watermark(code):
    """Consulta sem contar detecção; só o dono vê o registro"""
    record = watermark_service.lookup(code)
    if record.sender_id != g.sender_id:
        raise NotFound(f"Watermark {code} not found")
    return success_response(record.to_dict())


@bp.route('/<code>', methods=['DELETE'])
@require_api_key
def purge_watermark(code):
    """Remoção administrativa; o código continua reservado"""
    watermark_service.purge(code)
    logger.warning(f"Marca d'água {code} removida via API administrativa")
    return success_response({'code': code}, 'Watermark purged')
