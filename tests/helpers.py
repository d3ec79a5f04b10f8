from __future__ import annotations

import json
from pathlib import Path

from flowscripts.flows import FlowDocument, load_flows


def write_flows(path: Path, nodes: list) -> FlowDocument:
    path.write_text(json.dumps(nodes), encoding="utf-8")
    return load_flows(path)


LEGACY_SCRIPT = """
module.exports = function (msg) { return msg; };
/* flows.json attributes
    "id": "{node_id}",
    "name": "{name}"{extra}
*/"""


def legacy_script(node_id: str, name: str, extra: str = "") -> str:
    return LEGACY_SCRIPT.replace("{node_id}", node_id).replace("{name}", name).replace("{extra}", extra)
