from datetime import datetime

from sqlalchemy import event, inspect

from app import db


class IssuedCode(db.Model):
    """Todo código já emitido. Nunca é apagado, nem no purge do registro,
    para que um código não volte a ser atribuído a outro remetente."""
    __tablename__ = 'issued_watermark_codes'

    code = db.Column(db.String(16), primary_key=True)
    issued_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<IssuedCode {self.code}>'


class MessageWatermark(db.Model):
    __tablename__ = 'message_watermarks'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), unique=True, nullable=False)
    sender_id = db.Column(db.String(64), nullable=False, index=True)
    recipient_id = db.Column(db.String(64))
    platform = db.Column(db.String(32), nullable=False)
    message_preview = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    # Alterados apenas por UPDATE atômico em WatermarkRegistry.record_detection
    detected_count = db.Column(db.Integer, default=0, nullable=False)
    last_detected_at = db.Column(db.DateTime)

    def __repr__(self):
        return f'<MessageWatermark {self.code} ({self.detected_count})>'

    def to_dict(self):
        """Representação serializada (camelCase, igual à API)"""
        return {
            'code': self.code,
            'senderId': self.sender_id,
            'recipientId': self.recipient_id,
            'platform': self.platform,
            'messagePreview': self.message_preview,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'detectedCount': self.detected_count,
            'lastDetectedAt': self.last_detected_at.isoformat() if self.last_detected_at else None,
        }


@event.listens_for(MessageWatermark, 'before_update')
def _reject_record_changes(mapper, connection, target):
    """Registros persistidos são imutáveis pelo ORM"""
    state = inspect(target)
    changed = [attr.key for attr in state.attrs if attr.history.has_changes()]
    if changed:
        raise ValueError(
            f"MessageWatermark {target.code} is immutable (changed: {', '.join(changed)})"
        )
