from gym_access.db.base import Base
from gym_access.db.session import SessionLocal, engine

__all__ = ["Base", "SessionLocal", "engine"]
