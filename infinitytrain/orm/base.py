"""
infinitytrain/orm/base.py
Declarative base shared by all ORM models
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
