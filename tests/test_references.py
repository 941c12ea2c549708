"""
ReferenceSet tests
"""
import random

from clinic_admin.services.references import ReferenceSet


def ids(entities):
    return [entity.id for entity in entities]


def test_partition_on_construction(doctors):
    refs = ReferenceSet(doctors, selected=["d2"])
    assert ids(refs.assigned) == ["d2"]
    assert ids(refs.available) == ["d1", "d3"]


def test_add_and_remove(doctors):
    refs = ReferenceSet(doctors)
    assert refs.add("d3")
    assert refs.add("d1")
    assert refs.selected == ("d3", "d1")
    # Views follow catalog order, not selection order
    assert ids(refs.assigned) == ["d1", "d3"]
    assert refs.remove("d3")
    assert ids(refs.available) == ["d2", "d3"]


def test_add_is_idempotent_and_catalog_bound(doctors):
    refs = ReferenceSet(doctors, selected=["d1"])
    assert not refs.add("d1")
    assert not refs.add("zzz")
    assert not refs.add("")
    assert refs.selected == ("d1",)


def test_remove_absent_is_noop(doctors):
    refs = ReferenceSet(doctors)
    assert not refs.remove("d1")


def test_stale_ids_are_hidden_but_kept(doctors):
    refs = ReferenceSet(doctors, selected=["d1", "gone"])
    assert refs.stale == ("gone",)
    assert ids(refs.assigned) == ["d1"]
    assert "gone" in refs.selected


def test_duplicate_selection_collapses(doctors):
    refs = ReferenceSet(doctors, selected=["d1", "d1", "d2"])
    assert refs.selected == ("d1", "d2")


def test_catalog_arriving_later(doctors):
    refs = ReferenceSet(selected=["d2"])
    assert refs.assigned == ()
    refs.set_catalog(doctors)
    assert ids(refs.assigned) == ["d2"]


def test_mutations_notify(doctors):
    refs = ReferenceSet(doctors)
    seen = []
    unsubscribe = refs.subscribe(lambda r: seen.append(r.selected))
    refs.add("d1")
    refs.reset(["d2"])
    refs.add("nope")
    unsubscribe()
    refs.remove("d2")
    assert seen == [("d1",), ("d2",)]


def test_views_always_partition_catalog(doctors):
    rng = random.Random(7)
    refs = ReferenceSet(doctors)
    catalog_ids = set(ids(doctors))
    for _ in range(200):
        doctor_id = rng.choice(["d1", "d2", "d3", "x"])
        if rng.random() < 0.5:
            refs.add(doctor_id)
        else:
            refs.remove(doctor_id)
        assigned = set(ids(refs.assigned))
        available = set(ids(refs.available))
        assert assigned.isdisjoint(available)
        assert assigned | available == catalog_ids
        assert len(refs.selected) == len(set(refs.selected))
