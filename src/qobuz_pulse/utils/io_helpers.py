import json
from pathlib import Path
from typing import List, Dict, Any, Iterable

from pydantic import BaseModel


def load_jsonl(file_path: Path) -> List[Dict[str, Any]]:
    """
    Reads a JSONL file and returns a list of dictionaries.

    Args:
        file_path: The Path object for the file to read.

    Returns:
        A list of dictionaries containing the data.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    data = []
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                data.append(json.loads(line))
    return data


def save_to_jsonl(data: List[Dict], file_path: Path, mode: str = "w"):
    """
    Saves a list of dictionaries to a file in JSONL format.

    Args:
        data: The list of dictionary records to save.
        file_path: The Path object for the output file.
        mode: The file open mode ('w' for write/overwrite, 'a' for append).
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, mode, encoding="utf-8") as f:
        for record in data:
            json_string = json.dumps(record, ensure_ascii=False)
            f.write(json_string + "\n")


def models_to_records(models: Iterable[BaseModel]) -> List[Dict[str, Any]]:
    """Dumps pydantic models to JSON-ready dictionaries."""
    return [model.model_dump(mode="json") for model in models]
