# -------------------------------------
# gtable - grouped columnar tables
# -------------------------------------
"""
Immutable, hierarchically-grouped columnar relations.

A Table is an ordered set of equal-length named columns (read-only numpy
arrays). A Grouping binds Tables with identical column sets to GroupIDs,
which form a tree used for labelling. Operations never modify their
inputs; derived Tables share untouched columns with their sources.

This package provides:
- Generic column operations (generic)
- Table and Builder (table)
- GroupID, Grouping and GroupingBuilder (grouping)
- group_by, ungroup, flatten, concat, sort_by, filter_eq, map_tables,
  map_cols (ops)
- PyArrow interop (arrow), file readers (files), YAML pipelines (pipeline)

Imports are lazy to avoid RuntimeWarning when running submodules as scripts.
Use: from gtable import Table, group_by, etc.
"""

__all__ = [
    # table
    "Table",
    "Builder",
    "format_table",
    "print_table",
    # grouping
    "GroupID",
    "ROOT",
    "Grouping",
    "GroupingBuilder",
    "as_grouping",
    "format_grouping",
    "print_grouping",
    # ops
    "group_by",
    "ungroup",
    "flatten",
    "concat",
    "sort_by",
    "filter_eq",
    "map_tables",
    "map_cols",
    # generic
    "as_column",
    "multi_index",
    "cycle",
    "convert_slice",
    "sorter",
    "Sorter",
    "register_order",
    "unregister_order",
    "stable_argsort",
    # errors
    "TableError",
    "LengthMismatch",
    "UnknownColumn",
    "ColumnSetMismatch",
    "MissingColumn",
    "ExtraColumn",
    "ColumnTypeMismatch",
    "NotASequence",
    "NotOrderable",
    "NotConvertible",
    "NotComparable",
    "IndexOutOfRange",
    "EmptySequence",
    "PipelineError",
    # state
    "set_option",
    "get_option",
    "reset_options",
    # arrow / files / pipeline
    "table_to_arrow",
    "table_from_arrow",
    "grouping_to_arrow",
    "read_table",
    "load_pipeline",
    "run_pipeline",
]

# Lazy import mapping: attribute -> (module, name)
_LAZY_IMPORTS = {
    # table
    "Table": (".table", "Table"),
    "Builder": (".table", "Builder"),
    "format_table": (".table", "format_table"),
    "print_table": (".table", "print_table"),
    # grouping
    "GroupID": (".grouping", "GroupID"),
    "ROOT": (".grouping", "ROOT"),
    "Grouping": (".grouping", "Grouping"),
    "GroupingBuilder": (".grouping", "GroupingBuilder"),
    "as_grouping": (".grouping", "as_grouping"),
    "format_grouping": (".grouping", "format_grouping"),
    "print_grouping": (".grouping", "print_grouping"),
    # ops
    "group_by": (".ops", "group_by"),
    "ungroup": (".ops", "ungroup"),
    "flatten": (".ops", "flatten"),
    "concat": (".ops", "concat"),
    "sort_by": (".ops", "sort_by"),
    "filter_eq": (".ops", "filter_eq"),
    "map_tables": (".ops", "map_tables"),
    "map_cols": (".ops", "map_cols"),
    # generic
    "as_column": (".generic", "as_column"),
    "multi_index": (".generic", "multi_index"),
    "cycle": (".generic", "cycle"),
    "convert_slice": (".generic", "convert_slice"),
    "sorter": (".generic", "sorter"),
    "Sorter": (".generic", "Sorter"),
    "register_order": (".generic", "register_order"),
    "unregister_order": (".generic", "unregister_order"),
    "stable_argsort": (".generic", "stable_argsort"),
    # errors
    "TableError": (".errors", "TableError"),
    "LengthMismatch": (".errors", "LengthMismatch"),
    "UnknownColumn": (".errors", "UnknownColumn"),
    "ColumnSetMismatch": (".errors", "ColumnSetMismatch"),
    "MissingColumn": (".errors", "MissingColumn"),
    "ExtraColumn": (".errors", "ExtraColumn"),
    "ColumnTypeMismatch": (".errors", "ColumnTypeMismatch"),
    "NotASequence": (".errors", "NotASequence"),
    "NotOrderable": (".errors", "NotOrderable"),
    "NotConvertible": (".errors", "NotConvertible"),
    "NotComparable": (".errors", "NotComparable"),
    "IndexOutOfRange": (".errors", "IndexOutOfRange"),
    "EmptySequence": (".errors", "EmptySequence"),
    "PipelineError": (".errors", "PipelineError"),
    # state
    "set_option": (".state", "set_option"),
    "get_option": (".state", "get_option"),
    "reset_options": (".state", "reset_options"),
    # arrow / files / pipeline
    "table_to_arrow": (".arrow", "table_to_arrow"),
    "table_from_arrow": (".arrow", "table_from_arrow"),
    "grouping_to_arrow": (".arrow", "grouping_to_arrow"),
    "read_table": (".files", "read_table"),
    "load_pipeline": (".pipeline", "load_pipeline"),
    "run_pipeline": (".pipeline", "run_pipeline"),
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        module_name, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module
        module = import_module(module_name, __package__)
        return getattr(module, attr_name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
