import json
import logging
import time
import traceback
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_obj = {
            'level': record.levelname,
            'time': self.formatTime(record, '%Y-%m-%d %H:%M:%S'),
        }
        if isinstance(record.msg, dict):
            log_obj.update(record.msg)
        else:
            log_obj['logger'] = record.name
            log_obj['message'] = record.getMessage()
        return json.dumps(log_obj, ensure_ascii=False, default=str)


def setup_logging(level: int = logging.INFO):
    """JSON-логи для всего приложения"""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


logger = logging.getLogger('users_api.middleware')


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()

        try:
            response = await call_next(request)
            end = time.perf_counter()
            self.log(request, response, start, end)
            return response
        except Exception as e:
            end = time.perf_counter()
            self.log_exception(request, e, start, end)
            raise

    @staticmethod
    def _request_data(request: Request, start: float, end: float) -> dict:
        # email проставляется обработчиком входа
        username = getattr(request.state, 'user_email', '')

        user_ip = (
            request.headers.get('X-Real-IP')
            or request.headers.get('X-Forwarded-For', '').split(',')[0].strip()
            or (request.client.host if request.client else '')
        )

        return {
            'username': username,
            'user_ip': user_ip,
            'request_method': request.method,
            'request_url': str(request.url),
            'request_path': request.url.path,
            'request_duration_ms': round((end - start) * 1000, 2),
        }

    @classmethod
    def log(cls, request: Request, response: Response, start: float, end: float):
        status_code = response.status_code
        log_data = {'http_code': status_code, **cls._request_data(request, start, end)}

        if status_code >= 500:
            logger.error(msg=log_data)
        elif status_code >= 400:
            logger.warning(msg=log_data)
        else:
            logger.info(msg=log_data)

    @classmethod
    def log_exception(cls, request: Request, exception: Exception, start: float, end: float):
        log_data = {
            'http_code': 500,
            **cls._request_data(request, start, end),
            'exception': str(exception),
            'exception_type': type(exception).__name__,
            'traceback': traceback.format_exc(),
        }
        logger.error(msg=log_data)
