from typing import Annotated, Optional
from pydantic import BeforeValidator, StringConstraints


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


# WhatsApp conversation id carried from the chat bot through every booking step
SessionToken = Annotated[
    Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]],
    BeforeValidator(_blank_to_none),
]
