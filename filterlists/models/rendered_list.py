"""
Request-scoped list representation shared by the text renderer and the
YAML exporter. Never persisted.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from filterlists.config import DEFAULT_LIST_TITLE


@dataclass
class Instance:
    """One filter activated in a list, with decoded parameters."""
    filter_name: str
    params: Dict[str, Any] = field(default_factory=dict)
    test_mode: bool = False


@dataclass
class RenderedList:
    """Ordered instances plus the global test-mode override."""
    instances: List[Instance] = field(default_factory=list)
    title: str = DEFAULT_LIST_TITLE
    test_mode: bool = False
