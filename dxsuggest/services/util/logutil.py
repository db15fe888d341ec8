from typing import Any, List, Dict, Optional
import logging
from logging.handlers import RotatingFileHandler
import os
from datetime import datetime
from uuid import UUID

from reasoner_pydantic.shared import LogEntry, LogLevelEnum

from dxsuggest.services.config import config


class LoggerWrapper(logging.LoggerAdapter):
    def __init__(self, logger, extra=None):
        super().__init__(logger, extra)
        self.query_log: Dict[UUID, List[Dict[str, Any]]] = {}

    def process(self, msg, kwargs):
        """
        Capture messages logged against a 'query_id' as LogEntry
        records, so that the log of a single diagnosis query can be
        returned alongside its ranked results. The 'query_id' and
        'level' keywords are stripped before the call reaches the
        underlying logger.
        """
        if "query_id" in kwargs:
            query_id = kwargs.pop("query_id")
            if query_id:
                log_entry: LogEntry = LogEntry(
                    timestamp=datetime.now(),
                    level=kwargs.pop("level") if "level" in kwargs else None,
                    message=msg
                )
                self.query_log.setdefault(query_id, []).append(log_entry.to_dict())
        # sanity check - in case the 'level' key is still
        # present, because it was not processed above
        if "level" in kwargs:
            kwargs.pop("level")
        return msg, kwargs

    def get_logs(self, query_id: UUID) -> List[Dict[str, str]]:
        """
        Release the log entries captured for a given query.
        Entries are removed once retrieved.
        """
        entries = self.query_log.pop(query_id, [])
        return [
            {field: str(value) for field, value in entry.items()}
            for entry in entries
        ]

    def debug(self, msg, /, *args, query_id: Optional[UUID] = None, **kwargs):
        kwargs["query_id"] = query_id
        kwargs["level"] = LogLevelEnum.debug
        msg, kwargs = self.process(msg, kwargs)
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg, /, *args, query_id: Optional[UUID] = None, **kwargs):
        kwargs["query_id"] = query_id
        kwargs["level"] = LogLevelEnum.info
        msg, kwargs = self.process(msg, kwargs)
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg, /, *args, query_id: Optional[UUID] = None, **kwargs):
        kwargs["query_id"] = query_id
        kwargs["level"] = LogLevelEnum.warning
        msg, kwargs = self.process(msg, kwargs)
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg, /, *args, query_id: Optional[UUID] = None, **kwargs):
        kwargs["query_id"] = query_id
        kwargs["level"] = LogLevelEnum.error
        msg, kwargs = self.process(msg, kwargs)
        self.logger.error(msg, *args, **kwargs)

    def critical(self, msg, /, *args, query_id: Optional[UUID] = None, **kwargs):
        kwargs["query_id"] = query_id
        # LogLevelEnum has no 'critical' code
        kwargs["level"] = LogLevelEnum.error
        msg, kwargs = self.process(msg, kwargs)
        self.logger.critical(msg, *args, **kwargs)


class LoggingUtil(object):
    """ Logging utility controlling format and setting initial logging level """

    @staticmethod
    def init_logging(name, level=logging.INFO, format_sel='medium', log_file_level=None, log_file_path=None):

        # get a logger
        logger = logging.getLogger(name)

        # already configured by an earlier call
        if logger.handlers:
            return LoggerWrapper(logger)

        # define the output types
        format_types = {
            "short": '[%(name)s.%(funcName)s] : %(message)s',
            "medium": '[%(name)s.%(funcName)s] - %(asctime)-15s: %(message)s',
            "long": '[%(name)s.%(funcName)s] - %(asctime)-15s %(filename)s %(levelname)s: %(message)s'
        }[format_sel or 'medium']

        # create a stream handler (default to console)
        stream_handler = logging.StreamHandler()

        # create a formatter
        formatter = logging.Formatter(format_types)

        # set the formatter on the console stream
        stream_handler.setFormatter(formatter)

        # set the logging level
        logger.setLevel(level or logging.INFO)

        # fall back on the configured log file; an empty setting disables it
        if log_file_path is None:
            log_file = config.get('log_file')
            if log_file:
                log_file_path = log_file if os.path.isabs(log_file) else config.get_resource_path(log_file)

        if log_file_path:
            os.makedirs(os.path.dirname(os.path.abspath(log_file_path)), exist_ok=True)

            # create a rotating file handler, 1mb max per file with a max number of 10 files
            file_handler = RotatingFileHandler(filename=log_file_path, maxBytes=1000000, backupCount=10)

            # set the formatter
            file_handler.setFormatter(formatter)

            # if a log level for the file was passed in use it
            file_handler.setLevel(log_file_level or level or logging.INFO)

            # add the handler to the logger
            logger.addHandler(file_handler)

        # add the console handler to the logger
        logger.addHandler(stream_handler)

        # return to the caller
        return LoggerWrapper(logger)
