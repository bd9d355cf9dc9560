"""Unit tests for CircularDependencyDetector."""

import threading

import pytest

from scopewire.application.circular_detector import CircularDependencyDetector
from scopewire.domain import CircularDependencyError


class ServiceA:
    pass


class ServiceB:
    pass


class TestCircularDependencyDetector:
    """Test cases for the runtime re-entrance guard."""

    def test_push_and_pop(self):
        """Test that contracts are tracked on a stack."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        detector.push(ServiceB)
        assert detector.depth == 2

        detector.pop()
        detector.pop()
        assert detector.depth == 0

    def test_pop_empty_stack(self):
        """Test that popping an empty stack is harmless."""
        detector = CircularDependencyDetector()
        detector.pop()
        assert detector.depth == 0

    def test_reentry_raises(self):
        """Test that pushing a contract already on the stack raises."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        detector.push(ServiceB)

        with pytest.raises(CircularDependencyError) as exc_info:
            detector.push(ServiceA)

        assert exc_info.value.dependency_chain == [ServiceA, ServiceB, ServiceA]

    def test_activating_context_pops(self):
        """Test that the context manager pops even when the block fails."""
        detector = CircularDependencyDetector()

        with pytest.raises(ValueError):
            with detector.activating(ServiceA):
                assert detector.depth == 1
                raise ValueError("failure")

        assert detector.depth == 0

    def test_stacks_are_thread_local(self):
        """Test that other threads do not see this thread's stack."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        depths = []

        thread = threading.Thread(target=lambda: depths.append(detector.depth))
        thread.start()
        thread.join()

        assert depths == [0]
        assert detector.depth == 1

    def test_clear(self):
        """Test that clear empties the stack."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        detector.clear()
        assert detector.depth == 0

    def test_nodes_reported_by_contract(self):
        """Test that distinct nodes of one contract coexist and cycles report contracts."""
        detector = CircularDependencyDetector()
        detector.push(1, ServiceA)
        detector.push(2, ServiceA)
        detector.push(3, ServiceB)

        with pytest.raises(CircularDependencyError) as exc_info:
            detector.push(2, ServiceA)

        assert exc_info.value.dependency_chain == [ServiceA, ServiceB, ServiceA]
