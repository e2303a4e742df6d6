import os

class FlaskConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'lorebook-editor')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

class FlaskTestingConfig:
    TESTING = True
    SECRET_KEY = 'testing'
    MAX_CONTENT_LENGTH = 64 * 1024
