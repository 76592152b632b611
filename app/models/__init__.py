# Importar todos os models
from .watermark import IssuedCode, MessageWatermark

__all__ = ['IssuedCode', 'MessageWatermark']
