"""
Tests for imgsync.core.logging module.
"""

from unittest.mock import Mock

import pytest

from imgsync.core.logging import OperationLogger


class TestOperationLogger:
    """Tests for OperationLogger."""

    def test_logs_start_and_completion(self) -> None:
        logger = Mock()

        with OperationLogger("sync pass", logger, source_root="/src") as op:
            op.update(created=2)

        started = logger.info.call_args_list[0]
        completed = logger.info.call_args_list[1]
        assert started.args == ("Starting sync pass",)
        assert started.kwargs["source_root"] == "/src"
        assert completed.args == ("Completed sync pass",)
        assert completed.kwargs["created"] == 2
        assert completed.kwargs["duration_seconds"] >= 0
        logger.error.assert_not_called()

    def test_logs_failure_and_reraises(self) -> None:
        logger = Mock()

        with pytest.raises(RuntimeError):
            with OperationLogger("sync pass", logger):
                raise RuntimeError("source root vanished")

        logger.error.assert_called_once()
        kwargs = logger.error.call_args.kwargs
        assert kwargs["error_type"] == "RuntimeError"
        assert kwargs["error"] == "source root vanished"
