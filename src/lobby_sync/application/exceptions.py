from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class ServiceFault(AppError):
    """Request rejected by a remote service; carries a machine-readable code."""

    def __init__(self, code: str, detail: str = "") -> None:
        self.code = code
        super().__init__(detail)

    def __str__(self) -> str:
        return f"{self.code}: {self.detail}"


class TransientError(AppError):
    pass


class ServiceUnavailableError(TransientError):
    pass


class HubUnavailableError(TransientError):
    pass

