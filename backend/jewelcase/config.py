# backend/jewelcase/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/jewelcase.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///jewelcase.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Cases are due back this many days after delivery
    CASE_RETURN_WINDOW_DAYS = int(os.environ.get("CASE_RETURN_WINDOW_DAYS", "60"))

    # Item scanner (hosted generative model)
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    SCANNER_MODEL = os.environ.get("SCANNER_MODEL", "gpt-4o-mini")
