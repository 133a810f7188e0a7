"""Option stores used to persist the flattened catalog between processes."""

import json
import os
import tempfile
from typing import Dict, Optional, Protocol


class OptionStore(Protocol):
    """Named string values that survive process restarts."""
    
    def get(self, name: str) -> Optional[str]:
        ...
    
    def set(self, name: str, value: str) -> None:
        ...


class InMemoryOptionStore:
    """Option store kept in a dictionary, mostly for tests and one-off runs."""
    
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._options: Dict[str, str] = dict(initial or {})
    
    def get(self, name: str) -> Optional[str]:
        return self._options.get(name)
    
    def set(self, name: str, value: str) -> None:
        self._options[name] = value
    
    def delete(self, name: str) -> None:
        self._options.pop(name, None)


class JsonFileOptionStore:
    """
    Option store backed by a single JSON object file.
    
    The file is rewritten through a temporary file and renamed into place,
    so readers never see a partially written document.
    """
    
    def __init__(self, path: str) -> None:
        """
        Initialize the store.
        
        Args:
            path: Location of the JSON file; created on first write
        """
        self.path = path
    
    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Option file {self.path} does not contain a JSON object")
        return data
    
    def get(self, name: str) -> Optional[str]:
        return self._read_all().get(name)
    
    def _write_all(self, options: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(options, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
    
    def set(self, name: str, value: str) -> None:
        options = self._read_all()
        options[name] = value
        self._write_all(options)
    
    def delete(self, name: str) -> None:
        options = self._read_all()
        if name in options:
            del options[name]
            self._write_all(options)
