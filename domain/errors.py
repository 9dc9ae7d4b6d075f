class KitchenlyError(Exception):
    """Base for errors a caller is expected to map onto a response."""

    status = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str | int]:
        return {"message": self.message, "status": self.status}


class NotFoundError(KitchenlyError):
    status = 404


class BadRequestError(KitchenlyError):
    status = 400


class UnauthorizedError(KitchenlyError):
    """Raised by the authentication layer, never by the repositories."""

    status = 401
