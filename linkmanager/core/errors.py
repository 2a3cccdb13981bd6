class LinkManagerError(Exception):
    """Base error; carries the HTTP status the API layer responds with"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LinkManagerError):
    """Missing or malformed input"""
    status_code = 400


class NotFoundError(LinkManagerError):
    """No link with the requested id"""
    status_code = 404


class ConflictError(LinkManagerError):
    """A link with the same URL already exists"""
    status_code = 409


class StoreError(LinkManagerError):
    """Any other persistence failure"""
    status_code = 500
