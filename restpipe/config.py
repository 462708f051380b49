# Configuration settings should be set in app.config or passed to RestPipe(app, **kwargs)
# get_config looks up the active Flask app first, then the RestPipe class defaults and the environment
import os
import logging
from flask import current_app
import restpipe
from typing import Any, Optional


def get_config(option: str) -> Optional[Any]:
    """Retrieve a configuration parameter
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # RuntimeError: no flask app context (eg. when served by FastAPI)
        result = getattr(restpipe.RestPipe, option, os.environ.get(option, None))
    return result


def get_int_config(option: str) -> int:
    """
    :param option: configuration parameter holding an integer
    :return: the value as an int
    """
    return int(get_config(option))


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return restpipe.log.getEffectiveLevel() < logging.INFO
