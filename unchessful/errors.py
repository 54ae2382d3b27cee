from typing import Optional


class UnchessfulError(Exception):
    pass


class RequestFailed(UnchessfulError):
    """An engine API call failed: network, HTTP status, or an unexpected body."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class InvalidEngineMove(UnchessfulError):
    def __init__(self, move_san: str, fen: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"engine move {move_san!r} cannot be played in {fen}")
        self.move_san = move_san
        self.fen = fen
        self.cause = cause


class DispatcherClosed(UnchessfulError):
    pass
