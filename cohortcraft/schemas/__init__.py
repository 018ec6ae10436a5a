"""
Row schemas, one JSON schema file per backend table:
brand_guidelines, campaigns, micro_cohorts and campaign_creatives.
"""

import os
import json
import copy
from functools import lru_cache
from typing import Dict, Any, List

SCHEMA_DIR = os.path.dirname(os.path.abspath(__file__))

@lru_cache(maxsize=None)
def _read_schema(table: str) -> Dict[str, Any]:
    with open(os.path.join(SCHEMA_DIR, f"{table}.json"), 'r') as f:
        return json.load(f)

def load_schema(table: str, partial: bool = False) -> Dict[str, Any]:
    """
    Load the schema for a table.

    Args:
        table (str): Table name
        partial (bool): Drop the "required" list, for validating updates that
            only carry the changed columns

    Returns:
        Dict[str, Any]: A copy of the schema, safe to modify
    """
    schema = copy.deepcopy(_read_schema(table))
    if partial:
        schema.pop("required", None)
    return schema

def nullable_columns(table: str) -> List[str]:
    """
    List the columns of a table that may hold null.

    A column is nullable when its type list includes "null" or it declares no type.
    """
    columns = []
    for column, definition in _read_schema(table)["properties"].items():
        column_type = definition.get("type")
        if column_type is None or (isinstance(column_type, list) and "null" in column_type):
            columns.append(column)
    return columns
