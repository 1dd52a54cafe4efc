# apps/api/main.py
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from libs.observability.logging import setup_logging
from libs.contracts.errors import (
    EmptyHistory,
    FetchFailure,
    InsufficientData,
    InvalidFormat,
    MalformedQuote,
    MalformedRow,
    TickerError,
)
from apps.api.routers import health, tickers

app = FastAPI(title="ticker-stats API")
setup_logging()

# error kind -> HTTP status
_STATUS = {
    InvalidFormat: 422,
    InsufficientData: 422,
    EmptyHistory: 404,
    MalformedQuote: 502,
    MalformedRow: 502,
    FetchFailure: 502,
}


@app.exception_handler(TickerError)
async def ticker_error_handler(request: Request, exc: TickerError):
    status = next((s for kind, s in _STATUS.items() if isinstance(exc, kind)), 500)
    structlog.get_logger().warning(
        "api.ticker_error",
        path=request.url.path,
        status=status,
        error_code=exc.error_code,
        error=exc.message,
    )
    return JSONResponse(status_code=status, content=exc.to_dict())


@app.get("/", response_class=HTMLResponse)
def root():
    return """
    <html><body>
      <h1>Ticker Stats API</h1>
      <p>Try <code>/tickers/XOM/report?period=10y&amp;freq=m</code>,
         or see <a href="/docs">/docs</a> for Swagger UI.</p>
    </body></html>
    """

app.include_router(health.router)
app.include_router(tickers.router)
