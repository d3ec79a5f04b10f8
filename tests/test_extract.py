from __future__ import annotations

import pytest

from flowscripts.errors import FlowScriptError
from flowscripts.extract import ACTION_CREATED, ACTION_MOVED, ACTION_UPDATED, extract_node
from flowscripts.metadata import decode_metadata
from flowscripts.wrapper import unwrap

from helpers import legacy_script, write_flows


def test_extract_into_tab_folder(workspace):
    flows_path, src = workspace
    doc = write_flows(
        flows_path,
        [
            {"id": "tab1", "type": "tab", "label": "Main Tab"},
            {"id": "node1", "type": "function", "z": "tab1", "name": "My Function", "func": "return msg;"},
        ],
    )
    result = extract_node(doc, "node1", src)

    expected = src / "main-tab" / "my-function.js"
    assert result.action == ACTION_CREATED
    assert result.path == expected
    content = expected.read_text(encoding="utf-8")
    assert "@nr-id node1" in content
    assert "@nr-z tab1" in content
    assert unwrap(content) == "return msg;"


def test_extract_unknown_container_goes_to_global(workspace):
    flows_path, src = workspace
    doc = write_flows(
        flows_path,
        [{"id": "node2", "type": "function", "z": "unknown-tab", "name": "Global Func", "func": 'console.log("hi");'}],
    )
    assert extract_node(doc, "node2", src).path == src / "global" / "global-func.js"


def test_extract_subflow_folder_and_id_fallback(workspace):
    flows_path, src = workspace
    doc = write_flows(
        flows_path,
        [
            {"id": "sub1", "type": "subflow", "name": "My Subflow"},
            {"id": "node3", "type": "function", "z": "sub1", "name": "!!!", "func": "return;"},
        ],
    )
    assert extract_node(doc, "node3", src).path == src / "my-subflow" / "node3.js"


def test_extract_moves_existing_file(workspace):
    flows_path, src = workspace
    doc = write_flows(
        flows_path,
        [
            {"id": "tab_move", "type": "tab", "label": "New Home"},
            {"id": "node_move", "type": "function", "z": "tab_move", "name": "Mover", "func": "return 2;"},
        ],
    )
    old_path = src / "mover.js"
    old_path.write_text(legacy_script("node_move", "Mover"), encoding="utf-8")

    result = extract_node(doc, "node_move", src)

    new_path = src / "new-home" / "mover.js"
    assert result.action == ACTION_MOVED
    assert result.previous_path == old_path
    assert new_path.exists()
    assert not old_path.exists()
    content = new_path.read_text(encoding="utf-8")
    assert "@nr-z tab_move" in content
    assert "flows.json attributes" not in content
    assert unwrap(content) == "return 2;"


def test_extract_follows_container_change_without_duplicating(workspace):
    flows_path, src = workspace
    nodes = [
        {"id": "t1", "type": "tab", "label": "My Awesome Tab"},
        {"id": "t2", "type": "tab", "label": "Other Tab"},
        {"id": "f1", "type": "function", "z": "t1", "name": "Worker", "func": "a();"},
    ]
    doc = write_flows(flows_path, nodes)
    assert extract_node(doc, "f1", src).path == src / "my-awesome-tab" / "worker.js"

    nodes[2]["z"] = "t2"
    doc = write_flows(flows_path, nodes)
    result = extract_node(doc, "f1", src)

    assert result.action == ACTION_MOVED
    assert result.path == src / "other-tab" / "worker.js"
    assert sorted(p.relative_to(src).as_posix() for p in src.rglob("*.js")) == ["other-tab/worker.js"]


def test_extract_refreshes_in_place(workspace):
    flows_path, src = workspace
    nodes = [
        {"id": "t1", "type": "tab", "label": "Tab"},
        {"id": "f1", "type": "function", "z": "t1", "name": "Worker", "func": "a();"},
    ]
    extract_node(write_flows(flows_path, nodes), "f1", src)
    nodes[1]["func"] = "b();"
    result = extract_node(write_flows(flows_path, nodes), "f1", src)

    assert result.action == ACTION_UPDATED
    assert unwrap(result.path.read_text(encoding="utf-8")) == "b();"


def test_extract_keeps_same_named_script_of_other_node(workspace):
    flows_path, src = workspace
    doc = write_flows(
        flows_path,
        [
            {"id": "t1", "type": "tab", "label": "Tab"},
            {"id": "a1", "type": "function", "z": "t1", "name": "Format", "func": "a();"},
            {"id": "b2", "type": "function", "z": "t1", "name": "Format", "func": "b();"},
        ],
    )
    first = extract_node(doc, "a1", src)
    second = extract_node(doc, "b2", src)

    assert first.path == src / "tab" / "format.js"
    assert second.path == src / "tab" / "format-b2.js"
    assert decode_metadata(first.path.read_text(encoding="utf-8")).id == "a1"
    assert extract_node(doc, "b2", src).action == ACTION_UPDATED


def test_extract_unknown_id_fails(workspace):
    flows_path, src = workspace
    doc = write_flows(flows_path, [])
    with pytest.raises(FlowScriptError) as info:
        extract_node(doc, "missing", src)
    assert info.value.code == "E_NODE_NOT_FOUND"


def test_extract_without_container_fails(workspace):
    flows_path, src = workspace
    doc = write_flows(flows_path, [{"id": "f", "type": "function", "func": "x();"}])
    with pytest.raises(FlowScriptError) as info:
        extract_node(doc, "f", src)
    assert info.value.code == "E_NODE_CONTAINER_MISSING"
    assert "global scope" in info.value.diagnostic.message
    assert list(src.iterdir()) == []


def test_extract_rejects_non_function_node(workspace):
    flows_path, src = workspace
    doc = write_flows(
        flows_path,
        [
            {"id": "t1", "type": "tab", "label": "Main"},
            {"id": "d1", "type": "debug", "z": "t1", "name": "Out"},
        ],
    )
    with pytest.raises(FlowScriptError) as info:
        extract_node(doc, "d1", src)
    assert info.value.code == "E_NODE_NOT_FUNCTION"
    assert list(src.iterdir()) == []


def test_extract_does_not_clobber_hand_written_file(workspace):
    flows_path, src = workspace
    doc = write_flows(
        flows_path,
        [
            {"id": "t1", "type": "tab", "label": "Tab"},
            {"id": "f1", "type": "function", "z": "t1", "name": "Helpers", "func": "x();"},
        ],
    )
    (src / "tab").mkdir()
    handwritten = src / "tab" / "helpers.js"
    handwritten.write_text("exports.x = 1;\n", encoding="utf-8")

    result = extract_node(doc, "f1", src)
    assert result.path == src / "tab" / "helpers-f1.js"
    assert handwritten.read_text(encoding="utf-8") == "exports.x = 1;\n"
