"""aiohttp application exposing the result store."""

import logging
from typing import Callable, Dict, Optional

from aiohttp import web

from ..core.enums import DeliveryMode
from ..publishing.store import ResultStore

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("result_store", ResultStore)
MODE_KEY = web.AppKey("delivery_mode", DeliveryMode)
STATUS_KEY = web.AppKey("status_provider", object)

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Market Scanner</title>
  <style>
    body {{ margin: 0; height: 100vh; display: flex; flex-direction: column;
           justify-content: center; align-items: center; gap: 2rem;
           font-family: Arial, sans-serif; background-color: #f0f0f0; }}
    #time {{ font-size: 4rem; font-weight: bold; color: #333; }}
    #symbol-container {{ text-align: center; }}
    #best-symbol {{ font-size: 2.5rem; font-weight: bold; color: #2196F3; }}
    .detail {{ font-size: 1.2rem; color: #666; margin-top: 0.5rem; }}
    #history {{ display: flex; flex-direction: column; gap: 0.5rem; max-height: 40vh; overflow-y: auto; }}
    .card {{ background: #fff; border-radius: 6px; padding: 0.5rem 1rem; color: #333; }}
  </style>
</head>
<body>
  <div id="time"></div>
  <div id="symbol-container">
    <div class="detail">Best Performing Symbol</div>
    <div id="best-symbol">-</div>
    <div id="moves" class="detail">-</div>
    <div id="extra" class="detail"></div>
  </div>
  <div id="history"></div>
  <script>
    const MODE = "{mode}";
    let lastUpdateTime = 0;

    function updateTime() {{
      document.getElementById('time').textContent =
        new Date().toLocaleTimeString('en-GB', {{ hour12: false }});
    }}
    updateTime();
    setInterval(updateTime, 1000);

    function show(data) {{
      document.getElementById('best-symbol').textContent = data.symbol;
      document.getElementById('moves').textContent = data.moves + ' moves';
      document.getElementById('extra').textContent =
        data.turnover + 'M turnover, funding ' + data.fundingRate + '%';
      lastUpdateTime = data.timestamp;
    }}

    function showHistory(items) {{
      document.getElementById('history').innerHTML = items.map(item =>
        '<div class="card"><strong>' + item.symbol + '</strong> ' + item.moves + ' moves, ' +
        item.turnover + 'M turnover, funding ' + item.fundingRate + '%, ' +
        new Date(item.timestamp).toLocaleTimeString('en-GB', {{ hour12: false }}) + '</div>'
      ).join('');
    }}

    function poll() {{
      const url = MODE === 'poll'
        ? '/api/updates?lastUpdate=' + lastUpdateTime
        : '/api/symbols';
      fetch(url)
        .then(r => r.status === 304 ? null : r.json())
        .then(data => {{
          if (!data) return;
          const item = MODE === 'poll' ? data : data.current;
          if (item && item.timestamp !== lastUpdateTime) show(item);
          if (MODE === 'snapshot') showHistory(data.history || []);
        }})
        .catch(err => console.error('Polling error:', err))
        .finally(() => setTimeout(poll, 1000));
    }}
    poll();
  </script>
</body>
</html>
"""


async def handle_index(request: web.Request) -> web.Response:
    mode = request.app[MODE_KEY]
    return web.Response(text=INDEX_HTML.format(mode=mode.value), content_type="text/html")


async def handle_updates(request: web.Request) -> web.Response:
    """Latest result if newer than ``lastUpdate``, else 304."""
    try:
        last_seen = int(request.query.get("lastUpdate", "0"))
    except ValueError:
        last_seen = 0

    update = request.app[STORE_KEY].updates_since(last_seen)
    if update is None:
        return web.Response(status=304)
    return web.json_response(update)


async def handle_symbols(request: web.Request) -> web.Response:
    return web.json_response(request.app[STORE_KEY].snapshot())


async def handle_status(request: web.Request) -> web.Response:
    provider = request.app[STATUS_KEY]
    status = provider() if provider else {}
    return web.json_response(status)


def create_app(
    store: ResultStore,
    mode: DeliveryMode = DeliveryMode.POLL,
    status_provider: Optional[Callable[[], Dict]] = None,
) -> web.Application:
    """Build the HTTP application for one delivery mode."""
    mode = DeliveryMode(mode)
    app = web.Application()
    app[STORE_KEY] = store
    app[MODE_KEY] = mode
    app[STATUS_KEY] = status_provider

    app.router.add_get("/", handle_index)
    app.router.add_get("/api/status", handle_status)
    if mode is DeliveryMode.POLL:
        app.router.add_get("/api/updates", handle_updates)
    else:
        app.router.add_get("/api/symbols", handle_symbols)

    logger.info(f"HTTP app created (delivery mode: {mode.value})")
    return app
