import io
import logging

import pytest

from expense_dashboard import logging_setup


@pytest.mark.parametrize(
    'level, expected',
    [(logging.DEBUG, logging.DEBUG), ('warning', logging.WARNING), (' error ', logging.ERROR), ('15', 15), ('loud', logging.INFO)],
)
def test_parse_level(level, expected):
    assert logging_setup._parse_level(level) == expected


def test_parse_level_reads_environment(monkeypatch):
    monkeypatch.setenv('EXPENSE_DASHBOARD_LOG_LEVEL', 'debug')
    assert logging_setup._parse_level(None) == logging.DEBUG
    monkeypatch.setenv('EXPENSE_DASHBOARD_LOG_LEVEL', 'nonsense')
    assert logging_setup._parse_level(None) == logging.INFO


def test_configure_logging_attaches_one_handler(monkeypatch):
    pkg_logger = logging.getLogger('expense_dashboard')
    saved = (list(pkg_logger.handlers), pkg_logger.level, pkg_logger.propagate)
    monkeypatch.setattr(logging_setup, '_CONFIGURED', False)
    stream = io.StringIO()
    try:
        pkg_logger.handlers = [logging.NullHandler()]
        logging_setup.configure_logging('warning', fmt='%(levelname)s %(message)s', stream=stream)
        logging_setup.configure_logging('debug', stream=io.StringIO())

        assert len(pkg_logger.handlers) == 1
        log = logging_setup.get_logger('expense_dashboard.tests')
        log.info('hidden')
        log.warning('shown')
        assert stream.getvalue() == 'WARNING shown\n'
    finally:
        pkg_logger.handlers, pkg_logger.propagate = saved[0], saved[2]
        pkg_logger.setLevel(saved[1])
