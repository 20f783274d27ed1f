import logging, json, sys, time, os


def get_logger(name="i2kn", level=None, to_file=None):
    """Structured one-line JSON logger shared by every i2kn component."""
    logger = logging.getLogger(name)
    if level is None:
        level = os.getenv("I2KN_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def set_level(level, prefix="i2kn"):
    """Apply one level to every logger already created under `prefix`."""
    for name, obj in logging.root.manager.loggerDict.items():
        if isinstance(obj, logging.Logger) and (name == prefix or name.startswith(prefix + ".")):
            obj.setLevel(level)
