import logging
import logging.config
import warnings

import yaml

import configs

LOGGING_CONFIG_FILE = "logging_config.yaml"


def setup_warnings():
    warnings.simplefilter(action="ignore", category=FutureWarning)
    warnings.simplefilter(action="ignore", category=DeprecationWarning, append=True)


def setup_logger(config_file: str = LOGGING_CONFIG_FILE):
    with open(config_file) as f:
        dict_config = yaml.safe_load(f)
    dict_config["handlers"]["logfile"]["filename"] = configs.LOG_FILE

    if not configs.LOG_STDOUT:
        del dict_config["handlers"]["console"]
        dict_config["root"]["handlers"].remove("console")

    dict_config["loggers"]["utils.cache"] = {"level": configs.CACHE_LOG_LEVEL}
    for handler in dict_config["handlers"].values():
        handler["level"] = max(
            logging.getLevelName(configs.MIN_LOG_LEVEL), logging.getLevelName(handler["level"])
        )

    logging.config.dictConfig(dict_config)


def setup():
    setup_warnings()
    setup_logger()
