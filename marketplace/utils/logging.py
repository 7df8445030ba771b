# marketplace/utils/logging.py
import logging
from contextvars import ContextVar

#request id ustawiany przez middleware, dokladany do kazdego rekordu logu
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter(_FORMAT))
_handler.addFilter(RequestIdFilter())

_root = logging.getLogger("marketplace")
_root.setLevel(logging.INFO)
if not _root.handlers:
    _root.addHandler(_handler)


def get_logger(name: str) -> logging.Logger:
    if not name.startswith("marketplace"):
        name = f"marketplace.{name}"
    return logging.getLogger(name)
