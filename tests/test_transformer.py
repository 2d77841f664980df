"""
Plain <-> instance transformation.
"""

import enum
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from rudder.validation import (
    EXCLUDE_EXTRANEOUS,
    Length,
    TransformOptions,
    instance_to_plain,
    plain_to_instance,
)
from rudder.validation.transformer import is_list_type, is_structured_type, unwrap_type


class Color(enum.Enum):
    RED = "red"


class Author:
    name: str


class Book:
    title: Annotated[str, Length(1)]
    author: Author
    co_authors: List[Author]


class TestTypeHelpers:

    def test_unwrap(self):
        assert unwrap_type(Annotated[Optional[int], "meta"]) is int

    def test_structured(self):
        assert is_structured_type(Book)
        assert is_structured_type(List[int])
        assert is_structured_type(Dict[str, Any])
        assert not is_structured_type(str)
        assert not is_structured_type(Color)
        assert not is_structured_type(Any)

    def test_list(self):
        assert is_list_type(List[Book])
        assert not is_list_type(Book)


class TestPlainToInstance:

    def test_nested(self):
        book = plain_to_instance(
            {"title": "Dune", "author": {"name": "Frank"}, "co_authors": [{"name": "Brian"}]},
            Book,
        )
        assert isinstance(book, Book)
        assert isinstance(book.author, Author)
        assert book.author.name == "Frank"
        assert isinstance(book.co_authors[0], Author)

    def test_undeclared_fields_kept_by_default(self):
        book = plain_to_instance({"title": "Dune", "year": 1965}, Book)
        assert book.year == 1965

    def test_exclude_extraneous(self):
        book = plain_to_instance(
            {"title": "Dune", "year": 1965}, Book, TransformOptions(strategy=EXCLUDE_EXTRANEOUS),
        )
        assert book.title == "Dune"
        assert not hasattr(book, "year")

    def test_exclude(self):
        book = plain_to_instance({"title": "Dune", "secret": 1}, Book, TransformOptions(exclude=["secret"]))
        assert not hasattr(book, "secret")

    def test_passthrough(self):
        assert plain_to_instance("x", Book) == "x"
        assert plain_to_instance({"a": 1}, dict) == {"a": 1}
        assert plain_to_instance(None, Book) is None
        assert plain_to_instance(5, int) == 5

    def test_list_target(self):
        authors = plain_to_instance([{"name": "a"}, {"name": "b"}], List[Author])
        assert [a.name for a in authors] == ["a", "b"]


class TestInstanceToPlain:

    def test_nested_and_private(self):
        author = plain_to_instance({"name": "Frank"}, Author)
        author._cache = "hidden"
        book = plain_to_instance({"title": "Dune", "author": {"name": "Frank"}}, Book)
        book.author = author
        assert instance_to_plain(book) == {"title": "Dune", "author": {"name": "Frank"}}

    def test_scalars(self):
        value = {"color": Color.RED, "day": date(2024, 1, 2), "price": Decimal("1.50"), "ids": (1, 2)}
        assert instance_to_plain(value) == {
            "color": "red",
            "day": "2024-01-02",
            "price": "1.50",
            "ids": [1, 2],
        }

    def test_exclude_options(self):
        book = plain_to_instance({"title": "Dune", "internal_id": 1, "extra": True}, Book)
        assert instance_to_plain(book, TransformOptions(exclude_prefixes=["internal_"])) == {
            "title": "Dune",
            "extra": True,
        }
        assert instance_to_plain(book, TransformOptions(strategy=EXCLUDE_EXTRANEOUS)) == {"title": "Dune"}

    def test_merge(self):
        merged = TransformOptions(exclude=["a"]).merge(TransformOptions(strategy=EXCLUDE_EXTRANEOUS))
        assert merged.exclude == ["a"]
        assert merged.strategy == EXCLUDE_EXTRANEOUS
        assert TransformOptions().merge({"exclude": ["b"]}).exclude == ["b"]
