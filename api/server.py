"""
HTTP API для календаря (WebApp): список броней, заявка, отмена
"""
import logging
from typing import Any, Dict

from aiohttp import web

from config import Settings
from database.database import StorageUnavailable
from services.arbitrator import ClaimArbitrator
from services.outcomes import Absent, Booked, Conflict, Denied, Fault, Removed
from services.requests import InvalidInput, cancel_request, list_query, parse_request

logger = logging.getLogger(__name__)

ARBITRATOR_KEY = web.AppKey("arbitrator", ClaimArbitrator)
SETTINGS_KEY = web.AppKey("settings", Settings)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'content-type',
}


def _json(data: Dict[str, Any], status: int = 200) -> web.Response:
    return web.json_response(data, status=status, headers=CORS_HEADERS)


def _bad_request(e: InvalidInput) -> web.Response:
    return _json({"ok": False, "error": "bad-params", "details": e.to_dict()}, status=400)


def _unavailable() -> web.Response:
    return _json({"ok": False, "error": "storage-unavailable"}, status=503)


async def _read_json(request: web.Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidInput("payload", "invalid JSON")
    if not isinstance(payload, dict):
        raise InvalidInput("payload", "must be object")
    return payload


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Preflight-запросы браузера и CORS-заголовки на всех ответах"""
    if request.method == 'OPTIONS':
        return web.Response(status=204, headers=CORS_HEADERS)
    response = await handler(request)
    response.headers.update(CORS_HEADERS)
    return response


async def health(request: web.Request) -> web.Response:
    return web.Response(text='ok')


async def status(request: web.Request) -> web.Response:
    """Состояние БД и число броней"""
    ledger = request.app[ARBITRATOR_KEY].ledger
    try:
        db_ok = ledger.ping()
        rows = ledger.count()
    except StorageUnavailable as e:
        logger.error(f"/status: БД недоступна: {e}")
        db_ok, rows = False, 0
    return _json({"ok": True, "db_ok": db_ok, "rows": rows})


async def get_bookings(request: web.Request) -> web.Response:
    """GET /bookings?chat_id=...&since=YYYY-MM-DD"""
    try:
        query = list_query(request.query.get('chat_id'), request.query.get('since'))
    except InvalidInput as e:
        return _bad_request(e)

    try:
        bookings = await request.app[ARBITRATOR_KEY].list(query)
    except StorageUnavailable as e:
        logger.error(f"Не удалось получить брони чата {query.chat_id}: {e}")
        return _unavailable()

    return _json({
        "ok": True,
        "chat_id": query.chat_id,
        "bookings": [
            {"date": b.date, "user_id": b.user_id, "user_name": b.user_name}
            for b in bookings
        ],
    })


async def ingest(request: web.Request) -> web.Response:
    """POST /ingest - заявка из календаря"""
    settings = request.app[SETTINGS_KEY]
    try:
        payload = await _read_json(request)
        if payload.get('type') != 'book':
            return web.Response(text='ok')
        claim = parse_request(payload, default_user_name=settings.DEFAULT_USER_NAME)
    except InvalidInput as e:
        logger.warning(f"/ingest: отклонена заявка: {e}")
        return _bad_request(e)

    outcome = await request.app[ARBITRATOR_KEY].claim(claim)

    if isinstance(outcome, Booked):
        return _json({"ok": True, "result": "booked",
                      "date": outcome.date, "owner_name": outcome.owner_name})
    if isinstance(outcome, Conflict):
        return _json({"ok": False, "result": "conflict",
                      "date": outcome.date, "owner_name": outcome.existing_owner_name})
    return _unavailable()


async def cancel(request: web.Request) -> web.Response:
    """POST /cancel_api - {chat_id, date, user_id, user_name?}"""
    try:
        payload = await _read_json(request)
        req = cancel_request(
            payload.get('chat_id'),
            payload.get('date'),
            payload.get('user_id'),
            payload.get('user_name'),
        )
    except InvalidInput as e:
        return _bad_request(e)

    outcome = await request.app[ARBITRATOR_KEY].cancel(req)

    if isinstance(outcome, Removed):
        return _json({"ok": True})
    if isinstance(outcome, Absent):
        return _json({"ok": False, "error": "not-found"})
    if isinstance(outcome, Denied):
        return _json({"ok": False, "error": "forbidden"})
    if isinstance(outcome, Fault):
        return _unavailable()
    raise TypeError(f"Неизвестный итог отмены: {outcome!r}")


def create_app(arbitrator: ClaimArbitrator, settings: Settings) -> web.Application:
    """Сборка aiohttp-приложения"""
    app = web.Application(middlewares=[cors_middleware])
    app[ARBITRATOR_KEY] = arbitrator
    app[SETTINGS_KEY] = settings

    app.router.add_get('/', health)
    app.router.add_get('/status', status)
    app.router.add_get('/bookings', get_bookings)
    app.router.add_post('/ingest', ingest)
    app.router.add_post('/cancel_api', cancel)

    return app


async def start_api(arbitrator: ClaimArbitrator, settings: Settings) -> web.AppRunner:
    """Запуск HTTP API рядом с polling"""
    runner = web.AppRunner(create_app(arbitrator, settings))
    await runner.setup()
    site = web.TCPSite(runner, settings.API_HOST, settings.API_PORT)
    await site.start()
    logger.info(f"HTTP API слушает {settings.API_HOST}:{settings.API_PORT}")
    return runner
