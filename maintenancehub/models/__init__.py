"""
SQLAlchemy instance shared by every model module.

Usage:
    from maintenancehub.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
