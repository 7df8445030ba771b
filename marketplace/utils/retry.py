# marketplace/utils/retry.py
from tenacity import retry, stop_after_attempt, retry_if_exception_type

from marketplace.domain.errors import OrderNumberConflict


def order_number_retry():
    #kolizja numeru zamowienia -> nowy numer i jedna ponowna proba, bez czekania
    return retry(
        reraise=True,
        stop=stop_after_attempt(2),
        retry=retry_if_exception_type(OrderNumberConflict),
    )
