import logging
from typing import Any, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .. import config
from ..errors import RequestFailed
from ..models import (
    EngineDescription,
    EngineDirectory,
    EngineRef,
    EngineVariant,
    GameMoveRequest,
    GameMoveResponse,
)

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class EngineClient:
    """Blocking calls to the engine API. Only the dispatcher thread uses this."""

    def __init__(
        self,
        api_url: str = config.API_URL,
        timeout: float = config.REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_engines(self) -> EngineDirectory:
        return self._call("GET", self.api_url, EngineDirectory)

    def get_engine_description(self, engine_ref: EngineRef) -> EngineDescription:
        return self._call("GET", engine_ref.entrypoint_url, EngineDescription)

    def get_position_evaluation(self, variant: EngineVariant, fen: str) -> GameMoveResponse:
        body = GameMoveRequest(fen=fen)
        return self._call("POST", variant.game_url, GameMoveResponse, json=body.model_dump())

    def close(self) -> None:
        self.session.close()

    def _call(self, method: str, url: str, model: Type[ModelT], **kwargs: Any) -> ModelT:
        log.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            # requests' JSONDecodeError is a RequestException too
            raise RequestFailed(url, str(e)) from e
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise RequestFailed(url, f"unexpected {model.__name__} body: {e}") from e
