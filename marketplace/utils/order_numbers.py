# marketplace/utils/order_numbers.py
import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 8


def generate_order_number(prefix: str = "MS") -> str:
    """
    Numer zamowienia: prefiks, znacznik czasu w ms i losowy sufiks base36.
    Unikalnosc gwarantuje dopiero constraint w bazie, sufiks tylko
    zmniejsza szanse kolizji przy rownoleglych checkoutach.
    """
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{millis}-{suffix}"
