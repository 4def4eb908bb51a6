class DefaultConfig:
    # "sqlite" or "json"
    STORAGE_BACKEND = "sqlite"
    # both default to files in the Flask instance folder
    DATABASE = None
    DATA_FILE = None

    LOAN_DAYS = 14
    TOLERANCE_DAYS = 2
    MAX_ACTIVE_LOANS = 3

    # overdue sweep, in seconds
    SWEEP_INTERVAL = 5 * 60
    SWEEPER_ENABLED = True

    SEED_DATA = True
    LOG_LEVEL = "INFO"
