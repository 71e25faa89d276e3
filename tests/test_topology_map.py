from __future__ import annotations

from storagecluster.topology.map import TopologyMap


def test_add_is_idempotent() -> None:
    topology = TopologyMap()
    topology.add("topology.kubernetes.io/zone", "a")
    snapshot = topology.to_dict()
    topology.add("topology.kubernetes.io/zone", "a")
    assert topology.to_dict() == snapshot


def test_add_with_node() -> None:
    topology = TopologyMap()
    topology.add("topology.rook.io/rack", "rack0", "node-1")
    topology.add("topology.rook.io/rack", "rack0", "node-1")

    assert topology.contains("topology.rook.io/rack", "rack0")
    assert topology.contains("topology.rook.io/rack", "rack0", "node-1")
    assert not topology.contains("topology.rook.io/rack", "rack0", "node-2")
    assert topology.nodes("topology.rook.io/rack", "rack0") == {"node-1"}


def test_contains_missing_key() -> None:
    assert not TopologyMap().contains("topology.kubernetes.io/zone", "a")


def test_get_key_values_sorted() -> None:
    topology = TopologyMap()
    for value in ("c", "a", "b"):
        topology.add("topology.kubernetes.io/zone", value)

    assert topology.get_key_values("zone") == ("topology.kubernetes.io/zone", ["a", "b", "c"])


def test_get_key_values_empty_map() -> None:
    assert TopologyMap().get_key_values("zone") == ("", [])


def test_get_key_values_no_matching_key() -> None:
    topology = TopologyMap()
    topology.add("topology.kubernetes.io/region", "east")
    assert topology.get_key_values("rack") == ("", [])


def test_get_key_values_first_key_in_sorted_order() -> None:
    topology = TopologyMap()
    topology.add("topology.kubernetes.io/zone", "a")
    topology.add("failure-domain.beta.kubernetes.io/zone", "x")

    key, values = topology.get_key_values("zone")
    assert key == "failure-domain.beta.kubernetes.io/zone"
    assert values == ["x"]


def test_dict_round_trip_keeps_nodes() -> None:
    topology = TopologyMap()
    topology.add("topology.rook.io/rack", "rack1", "node-2")
    topology.add("topology.kubernetes.io/zone", "a")

    restored = TopologyMap.from_dict(topology.to_dict())
    assert restored == topology


def test_from_dict_accepts_value_lists() -> None:
    topology = TopologyMap.from_dict({"topology.kubernetes.io/zone": ["b", "a", "b"]})
    assert topology.values("topology.kubernetes.io/zone") == ["a", "b"]


def test_remove_and_len() -> None:
    topology = TopologyMap()
    topology.add("topology.kubernetes.io/zone", "a")
    topology.add("topology.kubernetes.io/region", "east")
    assert len(topology) == 2

    topology.remove("topology.kubernetes.io/zone")
    topology.remove("not-there")
    assert topology.keys() == ["topology.kubernetes.io/region"]
