"""Record copy pipeline: contain sets, conversion, master key, orchestration.

Usage:
    from rowclone.copy import Copier, copy_record, prepare_copy
    from rowclone.copy import generate_contain, convert_tree, strip_fields
"""

from rowclone.copy.contain import build_contain, generate_contain, remove_ignored
from rowclone.copy.convert import (
    convert_children,
    convert_joins,
    convert_tree,
    strip_fields,
)
from rowclone.copy.copier import (
    Copier,
    CopyResult,
    CopyState,
    PreparedCopy,
    copy_record,
    prepare_copy,
)
from rowclone.copy.master_key import apply_master_key

__all__ = [
    "build_contain",
    "generate_contain",
    "remove_ignored",
    "strip_fields",
    "convert_joins",
    "convert_children",
    "convert_tree",
    "apply_master_key",
    "Copier",
    "CopyResult",
    "CopyState",
    "PreparedCopy",
    "copy_record",
    "prepare_copy",
]
