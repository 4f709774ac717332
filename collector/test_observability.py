import json
import logging

from collector.observability import JsonFormatter


def test_json_formatter_includes_extras():
    record = logging.LogRecord("collector.pipeline", logging.INFO, __file__, 1, "cycle %s", ("complete",), None)
    record.sent = 2

    payload = json.loads(JsonFormatter().format(record))

    assert payload["msg"] == "cycle complete"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "collector.pipeline"
    assert payload["sent"] == 2
    assert "args" not in payload
