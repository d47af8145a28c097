"""Logging configuration for PromptPlanner."""

import logging.config

from promptplanner import config as app_config

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        },
    },
    'handlers': {
        'default': {
            'level': 'INFO',
            'formatter': 'standard',
            'class': 'logging.StreamHandler',
            'stream': 'ext://sys.stdout',
        },
        'file': {
            'level': 'DEBUG',
            'formatter': 'standard',
            'class': 'logging.FileHandler',
            'filename': app_config.LOG_FILE,
            'mode': 'a',
            'delay': True,
        }
    },
    'loggers': {
        '': {  # root logger
            'handlers': ['default'],
            'level': 'INFO',
            'propagate': True
        },
        'promptplanner': {
            'handlers': ['default', 'file'],
            'level': 'INFO',
            'propagate': False
        },
        'aiohttp.access': {  # one line per relayed request is enough
            'handlers': ['default'],
            'level': 'WARNING',
            'propagate': False
        },
    }
}


def setup_logging():
    """Set up logging configuration."""
    logging.config.dictConfig(LOGGING_CONFIG)
