"""Plan tree linearization and row decoding."""

from spannerplan.plantree.decode import decode_row, decode_rows
from spannerplan.plantree.linearize import build_tree, encode_payload, node_text
from spannerplan.plantree.process import process_plan
from spannerplan.plantree.rows import RowWithPredicates
from spannerplan.plantree.wrap import wrap

__all__ = [
    "RowWithPredicates",
    "build_tree",
    "decode_row",
    "decode_rows",
    "encode_payload",
    "node_text",
    "process_plan",
    "wrap",
]
