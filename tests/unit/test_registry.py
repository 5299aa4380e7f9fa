"""
Unit tests for WorkerRegistry
Tests registration, unregistration, id shifting, snapshots and concurrent access
"""

import threading
import unittest

from mrcount.coordinator.registry import WorkerKind, WorkerRegistry
from mrcount.errors import ValidationError


class TestWorkerRegistry(unittest.TestCase):
    """Unit tests for WorkerRegistry class"""

    def setUp(self):
        self.registry = WorkerRegistry(min_mappers=2, min_reducers=2)

    def test_register_assigns_sequential_ids(self):
        first = self.registry.register('mapper', 'http://localhost:3001')
        second = self.registry.register('mapper', 'http://localhost:3002')
        reducer = self.registry.register('reducer', 'http://localhost:4001')

        self.assertEqual(first.worker_id, 0)
        self.assertEqual(second.worker_id, 1)
        self.assertEqual(reducer.worker_id, 0)
        self.assertTrue(first.created)
        self.assertEqual(reducer.total_mappers, 2)
        self.assertEqual(reducer.total_reducers, 1)

    def test_register_is_idempotent(self):
        first = self.registry.register('mapper', 'http://localhost:3001')
        again = self.registry.register('mapper', 'http://localhost:3001')

        self.assertEqual(first.worker_id, again.worker_id)
        self.assertFalse(again.created)
        self.assertEqual(self.registry.snapshot().mapper_count, 1)

    def test_same_address_may_register_as_both_kinds(self):
        self.registry.register('mapper', 'http://localhost:5000')
        self.registry.register('reducer', 'http://localhost:5000')

        snapshot = self.registry.snapshot()
        self.assertEqual(snapshot.mapper_count, 1)
        self.assertEqual(snapshot.reducer_count, 1)

    def test_register_validation(self):
        with self.assertRaises(ValidationError):
            self.registry.register(None, 'http://localhost:3001')
        with self.assertRaises(ValidationError):
            self.registry.register('mapper', '')
        with self.assertRaises(ValidationError):
            self.registry.register('combiner', 'http://localhost:3001')
        with self.assertRaises(ValidationError):
            self.registry.register('mapper', 3001)
        self.assertEqual(self.registry.snapshot().mapper_count, 0)

    def test_unregister_shifts_later_ids(self):
        for port in (3001, 3002, 3003):
            self.registry.register('mapper', f'http://localhost:{port}')

        self.assertTrue(self.registry.unregister('mapper', 'http://localhost:3001'))

        again = self.registry.register('mapper', 'http://localhost:3003')
        self.assertEqual(again.worker_id, 1)
        addresses = [w.address for w in self.registry.snapshot().mappers]
        self.assertEqual(addresses, ['http://localhost:3002', 'http://localhost:3003'])

    def test_unregister_unknown_is_noop(self):
        self.registry.register('reducer', 'http://localhost:4001')

        self.assertFalse(self.registry.unregister('reducer', 'http://localhost:4999'))
        self.assertFalse(self.registry.unregister('mapper', 'http://localhost:4001'))
        self.assertEqual(self.registry.snapshot().reducer_count, 1)

    def test_unregister_validation(self):
        with self.assertRaises(ValidationError):
            self.registry.unregister('worker', 'http://localhost:3001')

    def test_snapshot_ready_flag(self):
        self.registry.register('mapper', 'http://localhost:3001')
        self.registry.register('mapper', 'http://localhost:3002')
        self.registry.register('reducer', 'http://localhost:4001')
        self.assertFalse(self.registry.snapshot().ready)

        self.registry.register('reducer', 'http://localhost:4002')
        self.assertTrue(self.registry.snapshot().ready)

    def test_snapshot_is_isolated_from_later_mutations(self):
        self.registry.register('mapper', 'http://localhost:3001')
        snapshot = self.registry.snapshot()

        self.registry.register('mapper', 'http://localhost:3002')
        self.registry.unregister('mapper', 'http://localhost:3001')

        self.assertEqual([w.address for w in snapshot.mappers], ['http://localhost:3001'])
        self.assertEqual(snapshot.mappers[0].kind, WorkerKind.MAPPER)

    def test_snapshot_to_dict(self):
        self.registry.register('mapper', 'http://localhost:3001')
        self.registry.register('reducer', 'http://localhost:4001')

        data = self.registry.snapshot().to_dict()

        self.assertEqual(data['mappers'], [{'id': 0, 'address': 'http://localhost:3001'}])
        self.assertEqual(data['reducers'], [{'id': 0, 'address': 'http://localhost:4001'}])
        self.assertEqual(data['counts'], {'mappers': 1, 'reducers': 1})
        self.assertEqual(data['requirements'], {'minMappers': 2, 'minReducers': 2})
        self.assertFalse(data['ready'])


class TestWorkerRegistryConcurrency(unittest.TestCase):
    """Concurrent register/unregister must keep the lists duplicate-free"""

    def _run_threads(self, target, count):
        barrier = threading.Barrier(count)

        def worker(i):
            barrier.wait()
            target(i)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    def test_concurrent_duplicate_registration(self):
        registry = WorkerRegistry()
        ids = []
        self._run_threads(
            lambda i: ids.append(registry.register('mapper', 'http://localhost:3001').worker_id),
            16)

        self.assertEqual(registry.snapshot().mapper_count, 1)
        self.assertEqual(set(ids), {0})

    def test_concurrent_distinct_registration(self):
        registry = WorkerRegistry()
        self._run_threads(
            lambda i: registry.register('reducer', f'http://localhost:{4000 + i}'), 32)

        snapshot = registry.snapshot()
        addresses = [w.address for w in snapshot.reducers]
        self.assertEqual(snapshot.reducer_count, 32)
        self.assertEqual(len(set(addresses)), 32)

    def test_concurrent_register_and_unregister(self):
        registry = WorkerRegistry()
        for i in range(20):
            registry.register('mapper', f'http://localhost:{3000 + i}')

        def churn(i):
            if i % 2:
                registry.unregister('mapper', f'http://localhost:{3000 + i}')
            else:
                registry.register('mapper', f'http://localhost:{5000 + i}')

        self._run_threads(churn, 20)

        addresses = [w.address for w in registry.snapshot().mappers]
        self.assertEqual(len(addresses), 20)
        self.assertEqual(len(set(addresses)), 20)
        for i in range(1, 20, 2):
            self.assertNotIn(f'http://localhost:{3000 + i}', addresses)


if __name__ == '__main__':
    unittest.main()
