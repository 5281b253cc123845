from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException

from accessstats import config
from accessstats.access_log_middleware import AccessLogMiddleware
from accessstats.line_parser import LineParser, ParseError
from accessstats.processor import LogProcessor
from accessstats.sources import LogNotFoundError, build_source, object_key, open_log_lines
from accessstats.statistics import SummaryModel

log = logging.getLogger(__name__)


def get_log_source():
    return build_source(bucket=config.LOG_BUCKET, base_url=config.LOG_BASE_URL, directory=config.LOG_DIR)


def _check_token(authorization: Optional[str]) -> None:
    if config.TOKEN and authorization != f"Bearer {config.TOKEN}":
        raise HTTPException(401, "unauthorized")


def create_app(access_log_path: str = config.ACCESS_LOG_PATH) -> FastAPI:
    app = FastAPI(title="accessstats")
    # compiled once, shared by every /summary request
    parser = LineParser()
    app.state.line_parser = parser
    if access_log_path:
        app.add_middleware(AccessLogMiddleware, path=access_log_path)

    @app.get("/ok")
    def ok():
        return {"ok": True}

    @app.get("/summary/{service}/{date}", response_model=SummaryModel)
    def summary(
        service: str,
        date: str,
        strict: bool = config.STRICT,
        source=Depends(get_log_source),
        authorization: str | None = Header(default=None),
    ):
        _check_token(authorization)
        key = object_key(service, date)
        try:
            with open_log_lines(source, key) as lines:
                stats = LogProcessor(parser, strict=strict).process(lines)
        except LogNotFoundError as exc:
            raise HTTPException(404, str(exc))
        except ParseError as exc:
            log.warning("aborting %s: %s", key, exc)
            raise HTTPException(422, str(exc))
        return stats.to_model()

    return app


app = create_app()
