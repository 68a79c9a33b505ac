# /config.py
import os

from dotenv import load_dotenv

load_dotenv()

# project root
basedir = os.path.abspath(os.path.dirname(__file__))
instance_path = os.path.join(basedir, "instance")
os.makedirs(instance_path, exist_ok=True)


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or "change-me-in-production"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f"sqlite:///{os.path.join(instance_path, 'brewtrack.db')}"
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    BREWTRACK_DEFAULT_PAGE_SIZE = int(os.environ.get('BREWTRACK_DEFAULT_PAGE_SIZE', 50))
    BREWTRACK_MAX_PAGE_SIZE = int(os.environ.get('BREWTRACK_MAX_PAGE_SIZE', 500))


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SECRET_KEY = "testing"
