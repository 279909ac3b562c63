#!/usr/bin/env python3
"""Tests for declarative criteria."""

import textwrap
from datetime import timedelta

import pytest
import yaml
from conftest import EPOCH, MemoryFileSystem, times_at

from treefind.core.result import WalkControl
from treefind.core.validators import ValidationError
from treefind.finder import Finder
from treefind.rules.loader import build_predicate


@pytest.fixture
def session(memory_fs: MemoryFileSystem) -> Finder:
    finder = Finder()
    finder.root = "root"
    finder.filesystem = memory_fs
    finder.started = EPOCH
    return finder


def matching(session, criterion):
    """Paths of the in-memory tree the criterion matches."""
    predicate = build_predicate(session, criterion)
    fs = session.filesystem
    return sorted(p for p in fs.nodes if predicate(p, fs.lstat(p)).matched)


class TestSimpleCriteria:
    """Tests for single criteria."""

    def test_flags(self, session):
        assert matching(session, "dir") == ["root", "root/sub"]
        assert matching(session, "empty") == ["root/a.txt"]
        assert matching(session, {"file": True}) == ["root/a.txt", "root/b.dat", "root/sub/c.txt"]

    def test_name_and_type(self, session):
        assert matching(session, {"name": "*.txt"}) == ["root/a.txt", "root/sub/c.txt"]
        assert matching(session, {"type": "d"}) == ["root", "root/sub"]
        assert matching(session, {"path": "root/*"}) == ["root/a.txt", "root/b.dat", "root/sub"]

    def test_regex(self, session):
        assert matching(session, {"regex": r"\.dat$"}) == ["root/b.dat"]

    def test_depth(self, session):
        assert matching(session, {"min_depth": 2}) == ["root/sub/c.txt"]
        assert matching(session, {"depth": 0}) == ["root"]

    def test_size_expressions(self, session):
        assert matching(session, {"size": "+3k"}) == ["root", "root/b.dat", "root/sub"]
        assert matching(session, {"size": "-1k"}) == ["root/a.txt"]
        assert matching(session, {"size": 5}) == ["root/sub/c.txt"]

    def test_prune(self, session, memory_fs):
        predicate = build_predicate(session, "prune")
        assert predicate("root/sub", memory_fs.lstat("root/sub")).control is WalkControl.PRUNE


class TestTimeCriteria:
    """Tests for newer and relative time criteria."""

    @pytest.fixture
    def tree(self, memory_fs):
        memory_fs.add_file("root/ref", times=times_at(timedelta(minutes=-10)))
        memory_fs.add_file("root/fresh", times=times_at(timedelta(minutes=-2)))
        return memory_fs

    def test_newer_shorthand(self, session, tree):
        """A bare path compares modification times."""
        assert "root/fresh" in matching(session, {"newer": "root/ref"})
        assert "root/ref" not in matching(session, {"newer": "root/ref"})

    def test_newer_mapping(self, session, tree):
        criterion = {"newer": {"reference": "root/ref", "kind": "a", "reference_kind": "m"}}
        assert "root/fresh" in matching(session, criterion)

    def test_mmin_forms(self, session, tree):
        assert matching(session, {"mmin": 2}) == ["root/fresh"]
        assert matching(session, {"mmin": "+5"}) == ["root/ref"]
        assert "root/fresh" in matching(session, {"mmin": "-5"})
        assert matching(session, {"mmin": {"minutes": 10, "compare": "eq"}}) == ["root/ref"]


class TestCompositeCriteria:
    """Tests for all, any, not and lists."""

    def test_list_is_all(self, session):
        assert matching(session, [{"name": "*.txt"}, {"max_depth": 1}]) == ["root/a.txt"]

    def test_any(self, session):
        criterion = {"any": [{"name": "a.txt"}, {"name": "c.txt"}]}
        assert matching(session, criterion) == ["root/a.txt", "root/sub/c.txt"]

    def test_not(self, session):
        assert matching(session, {"not": "dir"}) == ["root/a.txt", "root/b.dat", "root/sub/c.txt"]

    def test_from_yaml(self, session):
        document = yaml.safe_load(
            textwrap.dedent(
                """
            - any:
                - all: [{name: sub}, prune]
                - {name: "*.dat"}
            """
            )
        )
        predicate = build_predicate(session, document)
        fs = session.filesystem
        assert predicate("root/sub", fs.lstat("root/sub")).control is WalkControl.PRUNE
        assert predicate("root/b.dat", fs.lstat("root/b.dat")).matched
        assert not predicate("root/a.txt", fs.lstat("root/a.txt")).matched


class TestInvalidCriteria:
    """Malformed documents fail at load time."""

    @pytest.mark.parametrize(
        "criterion,message",
        [
            ("bogus", "Unknown criterion: bogus"),
            ({"bogus": 1}, "Unknown criterion: bogus"),
            ({"name": "a", "type": "f"}, "single-key mapping"),
            (42, "single-key mapping"),
            ({"name": ""}, "non-empty string"),
            ({"name": "[a-"}, "Criterion name"),
            ({"regex": "("}, "Failed to compile"),
            ({"type": "q"}, "Unknown file type"),
            ({"depth": -1}, "negative"),
            ({"size": "+3q"}, "Invalid size unit"),
            ({"mmin": "soon"}, "Invalid mmin expression"),
            ({"mmin": {"minutes": 1, "when": "now"}}, "Unknown mmin fields"),
            ({"mmin": {"minutes": 1, "compare": "about"}}, "Unknown comparison"),
            ({"newer": {"kind": "m"}}, "newer.reference"),
            ({"newer": {"reference": "x", "kind": "z"}}, "Unknown time type"),
            ({"empty": False}, "only accepts true"),
            ({"all": "dir"}, "requires a list"),
            ({"owner": True}, "name or numeric id"),
            ({"deadline": 0}, "positive number of seconds"),
        ],
    )
    def test_rejected(self, session, criterion, message):
        with pytest.raises(ValidationError, match=message):
            build_predicate(session, criterion)
