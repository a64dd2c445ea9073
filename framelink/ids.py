from __future__ import annotations
import secrets
import uuid

def new_token() -> str:
    return uuid.uuid4().hex

def new_identity() -> str:
    return uuid.uuid4().hex

def new_handler_id() -> int:
    return secrets.randbits(48)
