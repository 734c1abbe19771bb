# backend/moftrack/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/moftrack.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///moftrack.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # MOF serial numbers look like MOF-20260118093000-4F2A9C
    MOF_SERIAL_PREFIX = os.environ.get("MOF_SERIAL_PREFIX", "MOF")
    MOF_SERIAL_ATTEMPTS = int(os.environ.get("MOF_SERIAL_ATTEMPTS", "5"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
