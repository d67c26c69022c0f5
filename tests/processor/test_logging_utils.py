import logging

from slidem.processor.logging_utils import log_format


def _render(fmt, message):
    record = logging.LogRecord("slidem", logging.INFO, __file__, 1, message, None, None)
    return logging.Formatter(fmt).format(record)


def test_label_prefixes_message():
    line = _render(log_format("SLIDEM SW_A_20160311"), "Saved products")
    assert line.endswith("[INFO] SLIDEM SW_A_20160311: Saved products")


def test_no_label():
    line = _render(log_format(), "Saved products")
    assert line.endswith("[INFO] Saved products")


def test_percent_in_label_is_literal():
    line = _render(log_format("day 100%"), "done")
    assert line.endswith("day 100%: done")
