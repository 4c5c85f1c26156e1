import threading
import unittest

from ledger_fixtures import LedgerTestCase

from orderledger.core.errors import InsufficientStockError, StateConflictError
from orderledger.database import transaction
from orderledger.database.engine import SQLITE_BEGIN_IMMEDIATE
from orderledger.services import confirm_order, create_order
from orderledger.services.stock_ledger import get_product, increment


class ConcurrentTransitionTest(LedgerTestCase):
    file_database = True

    def _run_in_threads(self, target, args_list):
        barrier = threading.Barrier(len(args_list))
        outcomes = [None] * len(args_list)

        def worker(index, args):
            db = self.Session()
            try:
                barrier.wait()
                outcomes[index] = ("ok", target(db, *args))
            except Exception as exc:  # collected for assertions
                outcomes[index] = ("error", exc)
            finally:
                db.close()

        threads = [
            threading.Thread(target=worker, args=(index, args))
            for index, args in enumerate(args_list)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return outcomes

    def test_competing_confirms_never_oversell(self):
        customer = self.add_customer()
        product = self.add_product(stock=10)
        first = create_order(self.db, customer.id, [{"product_id": product.id, "quantity": 6}])
        second = create_order(self.db, customer.id, [{"product_id": product.id, "quantity": 7}])
        order_ids = [first.id, second.id]
        product_id = product.id
        self.db.close()

        outcomes = self._run_in_threads(confirm_order, [(order_ids[0],), (order_ids[1],)])

        successes = [value for kind, value in outcomes if kind == "ok"]
        failures = [value for kind, value in outcomes if kind == "error"]
        self.assertEqual(len(successes), 1)
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0], InsufficientStockError)

        winner_quantity = 6 if successes[0].id == order_ids[0] else 7
        product = self.product(product_id)
        self.assertGreaterEqual(product.current_stock, 0)
        self.assertEqual(product.current_stock, 10 - winner_quantity)
        self.assertEqual(product.total_out, winner_quantity)
        self.assertEqual(len(self.purchase_records()), 1)

    def test_same_order_confirmed_twice_concurrently(self):
        customer = self.add_customer()
        product = self.add_product(stock=10)
        order = create_order(self.db, customer.id, [{"product_id": product.id, "quantity": 4}])
        order_id, product_id = order.id, product.id
        self.db.close()

        outcomes = self._run_in_threads(confirm_order, [(order_id,), (order_id,)])

        kinds = sorted(kind for kind, _ in outcomes)
        self.assertEqual(kinds, ["error", "ok"])
        error = next(value for kind, value in outcomes if kind == "error")
        self.assertIsInstance(error, StateConflictError)
        self.assertEqual(self.product(product_id).current_stock, 6)
        self.assertEqual(len(self.purchase_records(order_id)), 1)

    def test_concurrent_creates_get_distinct_numbers(self):
        customer = self.add_customer()
        product = self.add_product(stock=100)
        lines = [{"product_id": product.id, "quantity": 1}]
        customer_id = customer.id
        self.db.close()

        outcomes = self._run_in_threads(create_order, [(customer_id, lines)] * 6)

        self.assertTrue(all(kind == "ok" for kind, _ in outcomes), outcomes)
        numbers = sorted(order.order_number for _, order in outcomes)
        self.assertEqual(numbers, [1, 2, 3, 4, 5, 6])


class ReadDuringWriteTest(LedgerTestCase):
    file_database = True
    busy_timeout_seconds = 1

    def test_reader_sees_last_commit_while_a_write_is_open(self):
        product_id = self.add_product(stock=10).id
        reader = self.Session()
        try:
            with transaction(self.db):
                options = self.db.connection().get_execution_options()
                self.assertTrue(options.get(SQLITE_BEGIN_IMMEDIATE))
                increment(self.db, product_id, 5)

                self.assertEqual(get_product(reader, product_id).current_stock, 10)
                reader.commit()
        finally:
            reader.close()

        self.assertEqual(self.product(product_id).current_stock, 15)


if __name__ == "__main__":
    unittest.main()
