from dataclasses import dataclass


@dataclass
class RequestContext:
    """Request-scoped context identifying the caller and the access key they used"""
    user_id: str
    access_key_id: str
