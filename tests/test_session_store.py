import re

import pytest

from sdsgen.data.session_store import MemorySessionStore, new_session_id
from sdsgen.data.spec_types import Specification
from sdsgen.errors import ValidationError


def test_session_id_format():
    assert re.fullmatch(r"spec_\d{13}_[0-9a-z]{9}", new_session_id())


def test_create_get_update(sample_spec):
    store = MemorySessionStore()
    sid = store.create(sample_spec, platform="web", complexity="auto")

    session = store.get(sid)
    assert session.specification is sample_spec
    assert session.created_at
    assert session.last_modified_at is None
    assert sid in store and len(store) == 1

    replacement = sample_spec.with_modules([])
    updated = store.update(sid, replacement)
    assert updated.specification is replacement
    assert updated.last_modified_at is not None
    assert updated.platform == "web"
    assert store.get(sid).specification is replacement


def test_get_unknown_returns_none():
    assert MemorySessionStore().get("spec_0_missing") is None


@pytest.mark.parametrize("sid", [None, "", "spec_0_missing", 12])
def test_require_unknown_is_a_validation_error(sid):
    with pytest.raises(ValidationError) as info:
        MemorySessionStore().require(sid)
    assert info.value.field == "session_id"


def test_update_unknown_is_a_validation_error():
    with pytest.raises(ValidationError):
        MemorySessionStore().update("spec_0_missing", Specification())


def test_bounded_store_evicts_oldest():
    store = MemorySessionStore(max_sessions=2)
    first = store.create(Specification(title="1"), platform="web", complexity="auto")
    second = store.create(Specification(title="2"), platform="web", complexity="auto")
    third = store.create(Specification(title="3"), platform="web", complexity="auto")

    assert first not in store
    assert second in store and third in store
    assert len(store) == 2


def test_session_to_dict(sample_spec):
    store = MemorySessionStore()
    sid = store.create(sample_spec, platform="web", complexity="simple", advanced_features=False)
    d = store.get(sid).to_dict()
    assert d["platform"] == "web"
    assert d["advanced_features"] is False
    assert d["specification"]["title"] == "Shop"
    assert "last_modified_at" not in d
