from .link import LinkCreate, LinkUpdate, LinkResponse, MessageResponse, ErrorResponse

__all__ = ["LinkCreate", "LinkUpdate", "LinkResponse", "MessageResponse", "ErrorResponse"]
