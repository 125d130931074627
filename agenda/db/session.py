from sqlalchemy import create_engine

from agenda.core.config import settings

engine = create_engine(settings.database_url, pool_pre_ping=True)
