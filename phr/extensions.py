# phr/extensions.py
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 DeclarativeBase shared by every model"""
    pass


db = SQLAlchemy(model_class=Base)
login_manager = LoginManager()
