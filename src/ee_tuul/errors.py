"""Exceptions raised when upstream data cannot be obtained or understood."""


class EETuulError(Exception):
    """Base class for all ee-tuul errors."""


class UpstreamError(EETuulError):
    """An upstream HTTP call failed (non-success status or transport error)."""

    def __init__(self, url: str, status_code: int | None = None, detail: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        self.detail = detail
        if status_code is not None:
            message = f"EMHI Error: {status_code} for {url}"
        else:
            message = f"EMHI Error: {detail or 'request failed'} for {url}"
        super().__init__(message)


class FeedMergeError(UpstreamError):
    """One or more station feeds failed while merging.

    ``statuses`` maps every feed name to its HTTP status code, the transport
    error text, or ``"ok"``. ``url`` names the failed feeds.
    """

    def __init__(self, statuses: dict[str, int | str]) -> None:
        self.statuses = statuses
        self.url = ", ".join(name for name, status in statuses.items() if status != "ok")
        self.status_code = next(
            (status for status in statuses.values() if isinstance(status, int)), None
        )
        self.detail = ", ".join(f"{name}={status}" for name, status in statuses.items())
        EETuulError.__init__(self, f"EMHI Error: {self.detail}")


class PayloadShapeError(EETuulError):
    """An upstream payload parsed but lacked the expected station list."""

    def __init__(self, message: str, code: str = "STATION_LIST_PARSE_FAIL") -> None:
        self.code = code
        super().__init__(message)
