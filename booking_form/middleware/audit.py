# booking_form/middleware/audit.py
# one JSON line per request on the "booking_form.audit" logger
# booking routes attach their outcome to request.state:
#   booking_id / replaced_booking_id  - set by POST /book on success
#   booking_error                     - set by the BookingError handler
# does not block the request and persists nothing

import json
import logging
import time

from fastapi import Request

logger = logging.getLogger("booking_form.audit")

STATE_FIELDS = ("booking_id", "replaced_booking_id", "booking_error")


async def audit_middleware(request: Request, call_next):
    start_ts = time.time()

    response = await call_next(request)

    record = {
        "ts": int(start_ts),
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "ip": request.headers.get("X-Real-IP") or (request.client.host if request.client else None),
        "duration_ms": int((time.time() - start_ts) * 1000),
    }
    if "date" in request.query_params:
        record["date"] = request.query_params["date"]
    for field in STATE_FIELDS:
        value = getattr(request.state, field, None)
        if value is not None:
            record[field] = value

    logger.info(json.dumps(record, ensure_ascii=False))

    return response
