"""
Marca d'água invisível usando caracteres Unicode zero-width.
Permite identificar quem vazou uma mensagem ao embutir um código curto no texto.

Formato v1 (estável entre versões, textos antigos precisam continuar legíveis):

    ZWNJ WJ ZWJ | bits do payload (ZWS = 0, ZWNJ = 1, MSB primeiro) | ZWJ WJ ZWNJ

    payload = versão (1 byte) + código em ASCII (10 bytes) + CRC-8

CRC-8: polinômio 0x07, init 0x00, sem reflexão, sobre versão + código.

Os marcadores começam e terminam com ZWNJ para que a letra vizinha (árabe,
scripts índicos) não mude de forma por causa do ZWJ interno.
"""
import re

# Caracteres invisíveis usados como "bits"
ZWS = '\u200b'   # zero-width space        = 0
ZWNJ = '\u200c'  # zero-width non-joiner   = 1
ZWJ = '\u200d'   # zero-width joiner       = marcador
WJ = '\u2060'    # word joiner             = marcador

START_MARKER = ZWNJ + WJ + ZWJ
END_MARKER = ZWJ + WJ + ZWNJ

FORMAT_VERSION = 1
CODE_ALPHABET = '0123456789abcdefghjkmnpqrstvwxyz'
CODE_LENGTH = 10
PAYLOAD_BITS = (1 + CODE_LENGTH + 1) * 8

ZERO_WIDTH_CHARS = frozenset((ZWS, ZWNJ, ZWJ, WJ))

_BIT_VALUES = {ZWS: '0', ZWNJ: '1'}
_FIRST_WORD = re.compile(r'\S+')
_ZERO_WIDTH_RE = re.compile('[' + ''.join(sorted(ZERO_WIDTH_CHARS)) + ']')


def crc8(data: bytes) -> int:
    """CRC-8 (poly 0x07, init 0x00)"""
    crc = 0
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x80:
                crc = ((crc << 1) ^ 0x07) & 0xFF
            else:
                crc = (crc << 1) & 0xFF
    return crc


def is_valid_code(code) -> bool:
    """Verifica tamanho e alfabeto do código"""
    return (
        isinstance(code, str)
        and len(code) == CODE_LENGTH
        and all(ch in CODE_ALPHABET for ch in code)
    )


def encode_watermark(code: str) -> str:
    """Converte o código em sequência invisível (marcadores + bits + checksum)."""
    if not is_valid_code(code):
        raise ValueError(f"Invalid watermark code: {code!r}")

    body = bytes([FORMAT_VERSION]) + code.encode('ascii')
    payload = body + bytes([crc8(body)])
    bits = ''.join(format(byte, '08b') for byte in payload)
    return START_MARKER + ''.join(ZWNJ if bit == '1' else ZWS for bit in bits) + END_MARKER


def _decode_bits(bits: str) -> str | None:
    if len(bits) != PAYLOAD_BITS:
        return None

    payload = int(bits, 2).to_bytes(PAYLOAD_BITS // 8, 'big')
    body, checksum = payload[:-1], payload[-1]
    if crc8(body) != checksum:
        return None
    if body[0] != FORMAT_VERSION:
        return None

    try:
        code = body[1:].decode('ascii')
    except UnicodeDecodeError:
        return None
    return code if is_valid_code(code) else None


def _scan(text: str):
    """Gera (inicio, fim, codigo) para cada sequência válida, da esquerda para a direita."""
    start = text.find(START_MARKER)
    while start != -1:
        pos = start + len(START_MARKER)
        bits = []
        while pos < len(text) and text[pos] in _BIT_VALUES:
            bits.append(_BIT_VALUES[text[pos]])
            pos += 1

        code = None
        if text.startswith(END_MARKER, pos):
            code = _decode_bits(''.join(bits))

        if code is not None:
            end = pos + len(END_MARKER)
            yield start, end, code
            start = text.find(START_MARKER, end)
        else:
            start = text.find(START_MARKER, start + 1)


def extract(text: str) -> str | None:
    """Extrai o primeiro código válido do texto. Retorna None se não encontrar.

    Checksum inválido, marcador incompleto ou tamanho errado contam como
    "sem marca d'água": a detecção é binária.
    """
    if not text:
        return None
    for _, _, code in _scan(text):
        return code
    return None


def has_watermark(text: str) -> bool:
    return extract(text) is not None


def strip_watermarks(text: str) -> str:
    """Remove apenas sequências válidas; outros zero-width (ex: emojis com ZWJ) ficam."""
    if not text:
        return text

    parts = []
    last = 0
    for start, end, _ in _scan(text):
        parts.append(text[last:start])
        last = end
    parts.append(text[last:])
    return ''.join(parts)


def strip_zero_width(text: str) -> str:
    """Remove todos os caracteres do alfabeto invisível (para comparar o texto visível)."""
    if not text:
        return text
    return _ZERO_WIDTH_RE.sub('', text)


def embed(text: str, code: str) -> str:
    """Insere a marca d'água invisível no texto, logo após a primeira palavra.

    Marcas anteriores são removidas antes, para que uma mensagem reenviada
    aponte para o remetente mais recente. Texto sem palavras recebe a marca no fim.
    """
    sequence = encode_watermark(code)
    clean = strip_watermarks(text)

    match = _FIRST_WORD.search(clean)
    position = match.end() if match else len(clean)
    return clean[:position] + sequence + clean[position:]
