import pytest

from tern.interpreter import Interpreter


@pytest.fixture
def run_program():
    """Run Tern source in a fresh interpreter; returns (printed lines, result)."""
    def _run(source: str, **kwargs):
        lines: list[str] = []
        result = Interpreter(output=lines.append, **kwargs).run(source)
        return lines, result
    return _run


@pytest.fixture
def output_of(run_program):
    """Run a program that must complete; returns its printed lines."""
    def _output(source: str, **kwargs) -> list[str]:
        lines, result = run_program(source, **kwargs)
        assert result.ok, result
        return lines
    return _output


@pytest.fixture
def failure_of(run_program):
    """Run a program that must fail; returns (printed lines, first diagnostic)."""
    def _failure(source: str, **kwargs):
        lines, result = run_program(source, **kwargs)
        assert not result.ok, f"expected failure, printed {lines}"
        return lines, result.diagnostics[0]
    return _failure
