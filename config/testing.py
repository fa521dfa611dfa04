from .config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

FINALIZATION_SCHEDULER_ENABLED = False
BULK_DELAY_SECONDS = 0.0
