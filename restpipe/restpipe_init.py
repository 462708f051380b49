import logging
import os
import sys
from flask import Flask
import flask.app
from typing import Any, Dict


class RestPipe:
    """This class holds the restpipe configuration and optionally binds it to a Flask application
    :param app: a Flask application (optional)
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Configuration settings are stored as class variables
    DEFAULT_LIMIT = 20
    MAX_LIMIT = 1000
    FILTER_SEPARATOR = "__"
    LOGLEVEL = logging.WARNING
    #
    config: Dict[str, Any] = {}

    def __init__(self, app: flask.app.Flask = None, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        for conf_name, conf_val in kwargs.items():
            setattr(RestPipe, conf_name, conf_val)
        if app is not None:
            self.init_app(app)

    def init_app(self, app: flask.app.Flask) -> None:
        """
        Copy the app configuration onto the class settings
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        for conf_name, conf_val in app.config.items():
            setattr(RestPipe, conf_name, conf_val)

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stdout so we redirect eveything to sys.stderr
        """
        log = logging.getLogger(__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# logging initialization
#
try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = RestPipe.init_logging(LOGLEVEL)
