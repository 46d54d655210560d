import hashlib

import pytest
from hypothesis import given, strategies as st

from tern.builtin.env_builtin import BUILTINS, hash_builtin, register
from tern.errors import TypeMismatch
from tern.types.environment import Environment


@pytest.mark.parametrize(
    "text,digest",
    [
        ("test", "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"),
        ("", "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"),
        ("abc", "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
    ]
)
def test_hash_vectors(output_of, text, digest):
    assert output_of(f'print hash("{text}");') == [digest]


def test_hash_result_is_a_string(output_of):
    assert output_of('var h = hash("test"); print h + "!";')[0].endswith("0a08!")


@given(st.text(alphabet=st.characters(exclude_categories=("Cs",))))
def test_hash_matches_sha256_of_utf8(text):
    digest = hash_builtin([text])
    assert digest == hashlib.sha256(text.encode("utf-8")).hexdigest()
    assert len(digest) == 64
    assert digest == digest.lower()


@pytest.mark.parametrize("arg", [1.0, True, [], None])
def test_hash_rejects_non_strings(arg):
    with pytest.raises(TypeMismatch):
        hash_builtin([arg])


def test_hash_type_error_in_program(failure_of):
    _, diag = failure_of("print hash(42);")
    assert diag.kind == "TypeMismatch"


def test_register_installs_builtins():
    env = Environment()
    register(env)
    assert env.lookup("hash") is BUILTINS["hash"]
