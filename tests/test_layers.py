from flowmap.ingest.builder import build_tree
from flowmap.layout.layers import ExpansionState, LayerIndex, hub_label
from flowmap.models import AccountNode, FlowRoot


def _ids(nodes) -> list[str]:
    return [n.id for n in nodes]


def test_chain_layer_index(chain_rows: list[dict]) -> None:
    index = LayerIndex.from_tree(build_tree(chain_rows))

    assert index.layers == [1, 2]
    assert _ids(index.nodes(1)) == ["A1", "A2"]
    assert _ids(index.nodes(2)) == ["A3"]
    assert index.cycles == []


def test_membership_follows_declared_layer_not_depth() -> None:
    rows = [
        {"AccountNo": "P", "Layer": 5},
        {"AccountNo": "C", "Layer": 1, "parent_acc_no": "P"},
    ]
    index = LayerIndex.from_tree(build_tree(rows))

    assert index.layers == [1, 5]
    assert _ids(index.nodes(1)) == ["C"]
    assert _ids(index.nodes(5)) == ["P"]


def test_shared_child_is_indexed_once() -> None:
    rows = [
        {"AccountNo": "A", "Layer": 1},
        {"AccountNo": "B", "Layer": 1},
        {"AccountNo": "C", "Layer": 2, "parent_acc_no": "A"},
        {"AccountNo": "C", "Layer": 2, "parent_acc_no": "B"},
    ]
    index = LayerIndex.from_tree(build_tree(rows))
    assert _ids(index.nodes(2)) == ["C"]
    assert index.node_count == 3


def test_depth_first_order() -> None:
    rows = [
        {"AccountNo": "R", "Layer": 1},
        {"AccountNo": "X", "Layer": 2, "parent_acc_no": "R"},
        {"AccountNo": "Y", "Layer": 2, "parent_acc_no": "R"},
        {"AccountNo": "X1", "Layer": 2, "parent_acc_no": "X"},
    ]
    index = LayerIndex.from_tree(build_tree(rows))
    assert _ids(index.nodes(2)) == ["X", "X1", "Y"]


def test_cycle_terminates_and_is_reported() -> None:
    a = AccountNode(id="A", layer=1)
    b = AccountNode(id="B", layer=2)
    a.children.append(b)
    b.children.append(a)
    index = LayerIndex.from_tree(FlowRoot(children=[a]))

    assert _ids(index.nodes(1)) == ["A"]
    assert _ids(index.nodes(2)) == ["B"]
    assert index.cycles == [("B", "A")]


def test_flow_root_itself_is_not_indexed() -> None:
    # an account that happens to share the synthetic root's name is still indexed
    node = AccountNode(id="Transaction Flow", layer=0)
    index = LayerIndex.from_tree(FlowRoot(children=[node]))
    assert _ids(index.nodes(0)) == ["Transaction Flow"]
    assert index.node_count == 1


def test_empty_tree_has_no_layers() -> None:
    index = LayerIndex.from_tree(build_tree([]))
    assert index.layers == []
    assert index.nodes(3) == []


def test_layer_position_and_labels() -> None:
    index = LayerIndex.from_tree(build_tree([{"AccountNo": "A", "Layer": 0}, {"AccountNo": "B", "Layer": 7}]))
    assert index.layer_position(7) == 1
    assert hub_label(0) == "Root"
    assert hub_label(7) == "Layer 7"


def test_expansion_defaults_per_view() -> None:
    canvas = ExpansionState(default_expanded=False)
    listing = ExpansionState(default_expanded=True)

    assert not canvas.is_expanded(1)
    assert listing.is_expanded(1)

    assert canvas.toggle(1) is True
    assert listing.toggle(1) is False
    assert canvas.is_expanded(1) and not listing.is_expanded(1)
    assert canvas.expanded([1, 2]) == [1]
    assert listing.expanded([1, 2]) == [2]


def test_expansion_set_reports_change() -> None:
    state = ExpansionState(default_expanded=False)
    assert state.set(2, True) is True
    assert state.set(2, True) is False
    assert state.set(3, False) is False
