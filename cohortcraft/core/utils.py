"""
Common utility functions for the cohortcraft package.

This module provides utility functions used across the cohortcraft package:
- File loading and saving (JSON and YAML)
- Row id and timestamp generation
"""

import os
import json
import uuid
import datetime
from typing import Dict, Any

import yaml

def generate_unique_id() -> str:
    """
    Generate a unique row ID.

    Returns:
        str: A uuid4 string
    """
    return str(uuid.uuid4())

def utc_timestamp() -> str:
    """
    Get the current UTC time as an ISO-8601 string.

    Returns:
        str: Timestamp such as "2024-05-01T12:00:00.000000+00:00"
    """
    return datetime.datetime.now(datetime.timezone.utc).isoformat()

def get_file_extension(file_path: str) -> str:
    """
    Get the file extension from a file path.

    Args:
        file_path (str): File path

    Returns:
        str: File extension without the dot
    """
    return os.path.splitext(file_path)[1][1:].lower()

def load_json_file(file_path: str) -> Dict[str, Any]:
    """
    Load a JSON file.

    Args:
        file_path (str): Path to JSON file

    Returns:
        Dict[str, Any]: Loaded JSON data

    Raises:
        FileNotFoundError: If file does not exist
        json.JSONDecodeError: If file is not valid JSON
    """
    with open(file_path, 'r') as f:
        return json.load(f)

def save_json_file(data: Dict[str, Any], file_path: str, indent: int = 2) -> None:
    """
    Save data to a JSON file, creating parent directories as needed.

    Args:
        data (Dict[str, Any]): Data to save
        file_path (str): Path to save JSON file
        indent (int, optional): JSON indentation level
    """
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(file_path, 'w') as f:
        json.dump(data, f, indent=indent)

def load_structured_file(file_path: str) -> Dict[str, Any]:
    """
    Load a JSON or YAML file, chosen by extension.

    Args:
        file_path (str): Path to a .json, .yaml or .yml file

    Returns:
        Dict[str, Any]: Loaded data

    Raises:
        ValueError: If the file does not contain a mapping
    """
    if get_file_extension(file_path) in ("yaml", "yml"):
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
    else:
        data = load_json_file(file_path)

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {file_path}")

    return data
