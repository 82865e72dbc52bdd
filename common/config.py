#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import os
import sys

import yaml

DEFAULT_LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

DEFAULTS = {
    'nats_url': 'nats://localhost:4222',
    'database_url': 'sqlite+aiosqlite:///trivia.db',
    'catalog': {'path': 'cache/items.json'},
    'trivia': {},
    'logging': {'level': 'info'},
}


class RobustFileHandler(logging.FileHandler):
    """FileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, catching OSError on Windows file handles"""
        try:
            super().flush()
        except OSError as e:
            # EINVAL from a handle in an inconsistent state
            if e.errno != 22:
                raise


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, str):
        handler = RobustFileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)

    formatter = logging.Formatter(log_format or DEFAULT_LOG_FORMAT)

    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def parse_log_level(level):
    """Map 'info'/'DEBUG'/20 style values to a logging level constant."""
    if isinstance(level, int):
        return level
    value = getattr(logging, str(level).upper(), None)
    if not isinstance(value, int):
        raise ValueError(f'Unknown log level: {level!r}')
    return value


def load_config(config_file):
    """Load configuration from a JSON or YAML file

    Missing top-level sections are filled from DEFAULTS. The
    TRIVIA_DATABASE_URL and TRIVIA_NATS_URL environment variables
    override the file.

    Args:
        config_file: Path to a .json, .yaml or .yml file

    Returns:
        Configuration dictionary
    """
    if config_file.endswith(('.yaml', '.yml')):
        with open(config_file, 'r', encoding='utf-8') as fp:
            conf = yaml.safe_load(fp) or {}
    else:
        with open(config_file, 'r', encoding='utf-8') as fp:
            conf = json.load(fp)

    if not isinstance(conf, dict):
        raise ValueError(f'Config root must be a mapping: {config_file}')

    for key, value in DEFAULTS.items():
        if isinstance(value, dict):
            conf[key] = {**value, **(conf.get(key) or {})}
        else:
            conf.setdefault(key, value)

    if 'TRIVIA_DATABASE_URL' in os.environ:
        conf['database_url'] = os.environ['TRIVIA_DATABASE_URL']
    if 'TRIVIA_NATS_URL' in os.environ:
        conf['nats_url'] = os.environ['TRIVIA_NATS_URL']

    return conf


def get_config(argv=None):
    """Load configuration from the file named on the command line

    Configures the root logger from the 'logging' section.

    Returns:
        Configuration dictionary

    Exits:
        Exits with status 1 if incorrect number of arguments
    """
    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        print('usage: %s <config file>' % argv[0], file=sys.stderr)
        sys.exit(1)

    conf = load_config(argv[1])

    logging_config = conf['logging']
    configure_logger(
        logging.getLogger(),
        log_file=logging_config.get('file'),
        log_format=logging_config.get('format'),
        log_level=parse_log_level(logging_config.get('level', 'info')),
    )

    return conf
