import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.exceptions import (
    ExpressionError,
    SurfaceDescentError,
    UnknownFunctionError,
    UnknownOptimizerError,
)
from runtime.function_registry import FunctionRegistry
from runtime.steppers import get_stepper


def test_hierarchy():
    assert issubclass(ExpressionError, SurfaceDescentError)
    assert issubclass(ExpressionError, ValueError)
    assert issubclass(UnknownFunctionError, KeyError)
    assert issubclass(UnknownOptimizerError, KeyError)


def test_messages_are_not_repr_quoted():
    err = UnknownFunctionError("foo")
    assert str(err) == "Unknown function id 'foo'."
    assert err.function_id == "foo"
    assert str(UnknownOptimizerError("bar")).startswith("Unknown optimizer 'bar'")


def test_expression_error_keeps_source_text():
    err = ExpressionError("x +")
    assert err.expression == "x +"
    assert "x +" in str(err)


def test_registry_and_steppers_raise_domain_errors():
    with pytest.raises(SurfaceDescentError):
        FunctionRegistry().get("missing")
    with pytest.raises(SurfaceDescentError):
        get_stepper("missing")
