from .extract import extract_node
from .flows import FlowDocument, load_flows
from .metadata import Metadata, decode_metadata, encode_metadata
from .migrate import migrate_scripts
from .scan import scan_functions
from .sync import sync_scripts
from .wrapper import unwrap, wrap

__all__ = [
    "__version__",
    "FlowDocument",
    "Metadata",
    "decode_metadata",
    "encode_metadata",
    "extract_node",
    "load_flows",
    "migrate_scripts",
    "scan_functions",
    "sync_scripts",
    "unwrap",
    "wrap",
]

__version__ = "0.1.0"
