import unittest

import pytest

from treebind import Inject, Injector, NoProviderError, Optional, Self, SkipSelf


class TestInjectorParentChain(unittest.TestCase):
    parent: Injector

    def setUp(self):
        self.parent = Injector.create([{"provide": "A", "use_value": "parent"}])

    def test_child_resolves_from_parent_when_not_registered_locally(self):
        child = Injector.create([], self.parent)

        assert child.get("A") == "parent"

    def test_child_registration_overrides_parent_registration(self):
        child = Injector.create([{"provide": "A", "use_value": "child"}], self.parent)

        assert child.get("A") == "child"
        assert self.parent.get("A") == "parent"

    def test_child_dependency_resolved_from_parent(self):
        child = Injector.create([{"provide": "B", "use_factory": lambda a: a + "!", "deps": ["A"]}], self.parent)

        assert child.get("B") == "parent!"

    def test_parent_value_is_shared_with_children(self):
        class Service: ...

        parent = Injector.create([{"provide": Service, "deps": []}])
        first = Injector.create([], parent)
        second = Injector.create([], parent)

        assert first.get(Service) is second.get(Service)
        assert first.get(Service) is parent.get(Service)

    def test_child_provider_values_are_not_visible_to_parent(self):
        Injector.create([{"provide": "B", "use_value": 2}], self.parent)

        with pytest.raises(NoProviderError):
            self.parent.get("B")

    def test_self_dependency_missing_locally_raises_even_if_parent_provides(self):
        child = Injector.create([{"provide": "B", "use_factory": lambda a: a, "deps": [[Self, "A"]]}], self.parent)

        with pytest.raises(NoProviderError) as ctx:
            child.get("B")
        assert ctx.value.token_path == ("B", "A")

    def test_self_dependency_present_locally(self):
        child = Injector.create(
            [
                {"provide": "A", "use_value": "child"},
                {"provide": "B", "use_factory": lambda a: a, "deps": [[Self(), "A"]]},
            ],
            self.parent,
        )

        assert child.get("B") == "child"

    def test_skip_self_ignores_local_provider(self):
        child = Injector.create(
            [
                {"provide": "A", "use_value": "child"},
                {"provide": "B", "use_factory": lambda a: a, "deps": [[SkipSelf, "A"]]},
            ],
            self.parent,
        )

        assert child.get("B") == "parent"

    def test_skip_self_on_root_injector_raises(self):
        injector = Injector.create(
            [
                {"provide": "A", "use_value": 1},
                {"provide": "B", "use_factory": lambda a: a, "deps": [[SkipSelf, "A"]]},
            ]
        )

        with pytest.raises(NoProviderError):
            injector.get("B")

    def test_skip_self_injector_is_parent(self):
        child = Injector.create(
            [{"provide": "up", "use_factory": lambda inj: inj, "deps": [[SkipSelf, Injector]]}],
            self.parent,
        )

        assert child.get(Injector) is child
        assert child.get("up") is self.parent

    def test_optional_dependency_missing_everywhere_is_none(self):
        child = Injector.create(
            [{"provide": "B", "use_factory": lambda a, c: (a, c), "deps": ["A", [Optional, "C"]]}],
            self.parent,
        )

        assert child.get("B") == ("parent", None)

    def test_optional_dependency_present_in_parent(self):
        child = Injector.create(
            [{"provide": "B", "use_factory": lambda a: a, "deps": [[Optional(), "A"]]}],
            self.parent,
        )

        assert child.get("B") == "parent"

    def test_optional_self_dependency_missing_locally_is_none(self):
        child = Injector.create(
            [{"provide": "B", "use_factory": lambda a: a, "deps": [[Optional, Self, Inject("A")]]}],
            self.parent,
        )

        assert child.get("B") is None

    def test_inject_names_the_token(self):
        child = Injector.create([{"provide": "B", "use_factory": lambda a: a, "deps": [[Inject("A")]]}], self.parent)

        assert child.get("B") == "parent"

    def test_missing_token_falls_through_to_not_found_value(self):
        child = Injector.create([], self.parent)

        assert child.get("missing", "default") == "default"


def test_error_path_continues_through_parent():
    parent = Injector.create([{"provide": "B", "use_factory": lambda a: a, "deps": ["A"]}])
    child = Injector.create([{"provide": "C", "use_factory": lambda b: b, "deps": ["B"]}], parent)

    with pytest.raises(NoProviderError) as ctx:
        child.get("C")

    assert ctx.value.token_path == ("C", "B", "A")
    assert str(ctx.value) == "InjectorError[C -> B -> A]: No provider for A!"
