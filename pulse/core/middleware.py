import json
import time
from datetime import datetime, timezone
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from pulse.logs import api_logger, debug_logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its status and duration.

    In production one JSON object per request is written so log processors
    can index the fields; elsewhere a readable line is used.
    """

    def __init__(self, app, json_logs: bool = False):
        super().__init__(app)
        self.json_logs = json_logs

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        timestamp = datetime.now(timezone.utc).isoformat()

        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        debug_logger.log_request(request)

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            debug_logger.log_exception(f"Error processing request {method} {path}")
            api_logger.error(f"Error processing request {method} {path} after {process_time:.3f}s: {e}")
            raise

        process_time = time.time() - start_time
        status_code = response.status_code

        if self.json_logs:
            log_data = {
                "level": "ERROR" if status_code >= 400 else "INFO",
                "timestamp": timestamp,
                "method": method,
                "path": path,
                "statusCode": status_code,
                "duration": f"{process_time * 1000:.0f}ms",
                "userAgent": request.headers.get("user-agent"),
                "ip": client_host,
            }
            message = json.dumps(log_data)
        else:
            message = (
                f"{method} {path} | "
                f"Status: {status_code} | "
                f"Client: {client_host} | "
                f"Process Time: {process_time:.3f}s"
            )

        if status_code >= 400:
            api_logger.error(message)
        else:
            api_logger.info(message)

        debug_logger.log_response(response, process_time)

        return response
