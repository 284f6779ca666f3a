"""Shared Flask-SQLAlchemy handle.

Models import ``db`` from here so they can be declared before the Flask
application is configured.
"""
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
