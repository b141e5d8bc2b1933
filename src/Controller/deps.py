#src/Controller/deps.py

from typing import Optional
from fastapi import Header
from src.DB.database import get_db as get_DB  # noqa: F401


def get_actor(x_actor_id: Optional[str] = Header(None, alias="X-Actor-ID")) -> Optional[str]:
    # Set by the authentication gateway; stored verbatim, never validated here.
    if x_actor_id is None or not x_actor_id.strip():
        return None
    return x_actor_id.strip()
