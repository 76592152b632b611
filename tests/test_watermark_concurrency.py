# tests/test_watermark_concurrency.py
"""
Testes de concorrência: várias threads, cada uma com sua conexão (SQLite em arquivo)
"""
from concurrent.futures import ThreadPoolExecutor

from app.services.watermark_registry import WatermarkRegistry
from app.services.watermark_service import WatermarkService

WORKERS = 8


class TestConcurrentIssue:
    """Emissões simultâneas nunca repetem código"""

    def test_codes_unique_under_concurrency(self, file_app):
        total = 1000

        def issue_one(i):
            with file_app.app_context():
                return WatermarkRegistry().issue(sender_id=f'u{i % 10}', platform='whatsapp').code

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            codes = list(pool.map(issue_one, range(total)))

        assert len(codes) == total
        assert len(set(codes)) == total

        with file_app.app_context():
            _, count = WatermarkRegistry().list(page=1, page_size=1)
        assert count == total


class TestConcurrentDetection:
    """Detecções simultâneas não perdem incrementos"""

    def test_no_lost_increments(self, file_app):
        checks = 200

        with file_app.app_context():
            result = WatermarkService().embed_for_send('Thanks for your order!', sender_id='u1')
            watermarked, code = result.watermarked_text, result.code

        def check_one(_):
            with file_app.app_context():
                return WatermarkService().check_text(watermarked).found

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            found = list(pool.map(check_one, range(checks)))

        assert all(found)
        with file_app.app_context():
            record = WatermarkRegistry().lookup(code)
            assert record.detected_count == checks
            assert record.last_detected_at is not None
