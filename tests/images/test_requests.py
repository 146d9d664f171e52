"""
Unit tests for the normalization request table.
"""

from concurrent.futures import Future, ThreadPoolExecutor

from photo_report.images import RequestTable


class TestRequestTable:
    """Insertion at submit, removal at completion."""

    def test_pending_request_is_tracked(self):
        # Arrange
        table = RequestTable()
        future = Future()

        # Act
        request = table.register(future)

        # Assert
        assert request.id in table
        assert table.get(request.id) is future
        assert len(table) == 1
        assert not request.done

    def test_completed_request_is_removed(self):
        table = RequestTable()
        future = Future()
        request = table.register(future)

        future.set_result("done")

        assert request.id not in table
        assert table.get(request.id) is None
        assert request.result() == "done"

    def test_failed_request_is_removed(self):
        table = RequestTable()
        future = Future()
        request = table.register(future)

        future.set_exception(RuntimeError("boom"))

        assert request.id not in table
        assert len(table) == 0

    def test_already_completed_future_never_stays_pending(self):
        table = RequestTable()
        future = Future()
        future.set_result(1)

        request = table.register(future)

        assert request.id not in table

    def test_ids_are_unique(self):
        table = RequestTable()

        ids = {table.register(Future()).id for _ in range(100)}

        assert len(ids) == 100
        assert sorted(table.pending_ids()) == sorted(ids)

    def test_cancel_all_cancels_pending(self):
        # Arrange
        table = RequestTable()
        futures = [Future() for _ in range(3)]
        for future in futures:
            table.register(future)

        # Act
        cancelled = table.cancel_all()

        # Assert
        assert cancelled == 3
        assert all(f.cancelled() for f in futures)
        assert len(table) == 0

    def test_concurrent_completions(self):
        """Completions arriving from many threads leave the table empty."""
        # Arrange
        table = RequestTable()
        futures = [Future() for _ in range(200)]
        requests = [table.register(f) for f in futures]

        # Act
        with ThreadPoolExecutor(max_workers=8) as executor:
            for i, future in enumerate(futures):
                executor.submit(future.set_result, i)

        # Assert
        assert len(table) == 0
        assert [r.result() for r in requests] == list(range(200))
