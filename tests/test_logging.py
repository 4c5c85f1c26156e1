import json
import logging
import unittest

from orderledger.core.logging import ContextFormatter, JsonFormatter


def _record(**extra):
    record = logging.LogRecord(
        name="orderledger.services.order_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Order %s.",
        args=("confirmed",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class LoggingFormatterTest(unittest.TestCase):
    def test_json_formatter_includes_context(self):
        payload = json.loads(JsonFormatter().format(_record(order_id=7, order_number=3)))
        self.assertEqual(payload["message"], "Order confirmed.")
        self.assertEqual(payload["order_id"], 7)
        self.assertEqual(payload["order_number"], 3)
        self.assertNotIn("product_id", payload)

    def test_context_formatter_appends_pairs(self):
        line = ContextFormatter(fmt="%(message)s").format(_record(product_id=5, quantity=2))
        self.assertEqual(line, "Order confirmed. [product_id=5 quantity=2]")

    def test_context_formatter_without_context(self):
        line = ContextFormatter(fmt="%(message)s").format(_record())
        self.assertEqual(line, "Order confirmed.")


if __name__ == "__main__":
    unittest.main()
