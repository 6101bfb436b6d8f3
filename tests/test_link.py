import pytest

from tome.link import (
    AllAvailableResolver,
    LinkKind,
    LinkResolver,
    LinkStatus,
    NoopLinkResolver,
)


def test_noop_resolver_says_missing():
    assert NoopLinkResolver().resolve_internal("Photon") == LinkStatus.missing()


def test_all_available_resolver_says_available():
    assert AllAvailableResolver().resolve_internal("Photon") == LinkStatus.available()


def test_redirect_carries_target():
    status = LinkStatus.redirect("Light")
    assert status.kind is LinkKind.REDIRECT
    assert status.target == "Light"


def test_redirect_equality_depends_on_target():
    assert LinkStatus.redirect("A") == LinkStatus.redirect("A")
    assert LinkStatus.redirect("A") != LinkStatus.redirect("B")


def test_available_and_missing_differ():
    assert LinkStatus.available().kind is LinkKind.AVAILABLE
    assert LinkStatus.missing().kind is LinkKind.MISSING
    assert LinkStatus.available().target is None


def test_resolver_is_abstract():
    with pytest.raises(TypeError):
        LinkResolver()


def test_custom_resolver():
    class Table(LinkResolver):
        def resolve_internal(self, target):
            if target == "Photon":
                return LinkStatus.available()
            if target == "Light particle":
                return LinkStatus.redirect("Photon")
            return LinkStatus.missing()

    r = Table()
    assert r.resolve_internal("Photon") == LinkStatus.available()
    assert r.resolve_internal("Light particle").target == "Photon"
    assert r.resolve_internal("Nothing").kind is LinkKind.MISSING