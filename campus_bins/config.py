import os


def _database_url():
    # Hosted Postgres still hands out the legacy scheme
    return os.environ.get('DATABASE_URL', 'sqlite:///campus_bins.db').replace('postgres://', 'postgresql://', 1)


def _cors_origins():
    raw = os.environ.get('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000')
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


class Config:
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 300,
        'pool_pre_ping': True,
    }
    CORS_ORIGINS = _cors_origins()
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', '1') == '1'


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    # Connection pool settings for production
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 300,
        'pool_pre_ping': True,
        'pool_size': 10,
        'max_overflow': 20,
    }
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', '0') == '1'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SEED_DEMO_DATA = False
    LOG_LEVEL = 'WARNING'


CONFIGS = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}


def get_config(name=None):
    """Pick a config class by name, falling back to APP_ENV and then development."""
    name = name or os.environ.get('APP_ENV', 'development')
    return CONFIGS.get(name, DevelopmentConfig)
