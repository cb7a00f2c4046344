# manage_backend/adapters/outbound/persistence/models/base_model.py

from sqlalchemy.orm import declarative_base

# Parent class of every ORM model; holds the shared metadata
Base = declarative_base()
